from __future__ import annotations

from pathlib import Path

import pytest
from dotenv import load_dotenv

# test/.env wins over the committed example values
TEST_ROOT = Path(__file__).resolve().parent
load_dotenv(TEST_ROOT / ".env", override=False)
load_dotenv(TEST_ROOT / ".env.example", override=False)

from test.settings import test_settings  # noqa: E402


@pytest.fixture(scope="session")
def test_config():
    return test_settings


@pytest.fixture(autouse=True)
def _logfire_offline(monkeypatch: pytest.MonkeyPatch):
    """No test exports spans or security events, whatever the environment says."""
    from fnb_cost.core import monitoring

    monkeypatch.setattr(monitoring, "LOGFIRE_ENABLED", False)
