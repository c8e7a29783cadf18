"""
Optional Pydantic Logfire export for the cost API.

Spans and events leave the process only when ``LOGFIRE_ENABLED`` is truthy
and a ``LOGFIRE_TOKEN`` is set. The ``log_*`` helpers return quietly in every
other case, so callers in middleware and the security analytics never check
the flag themselves.
"""

import logging
import os
from typing import Any, Callable, Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


LOGFIRE_ENABLED = _env_flag("LOGFIRE_ENABLED", "false")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "fnb-cost-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

LOGFIRE_TRACE_SQLALCHEMY = _env_flag("LOGFIRE_TRACE_SQLALCHEMY", "true")
LOGFIRE_TRACE_FASTAPI = _env_flag("LOGFIRE_TRACE_FASTAPI", "true")


def _instrument(label: str, hook: Callable[[], Any]) -> None:
    try:
        hook()
    except Exception as e:
        logger.warning(f"Failed to instrument {label}: {e}")
    else:
        logger.info(f"Logfire: {label} instrumentation enabled")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Configure Logfire and instrument the database engine and the app.

    Instrumentation failures are downgraded to warnings; only a failing
    ``configure`` call makes this return False.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False
    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set; nothing will be exported.")
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    if LOGFIRE_TRACE_SQLALCHEMY:
        _instrument("SQLAlchemy", logfire.instrument_sqlalchemy)
    if LOGFIRE_TRACE_FASTAPI and app is not None:
        _instrument("FastAPI", lambda: logfire.instrument_fastapi(app=app))

    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def _export(what: str, send: Callable[[Any], Any]) -> None:
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        send(logfire)
    except Exception:
        logger.debug(f"Could not export {what} to Logfire")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    _export(
        f"request {method} {path}",
        lambda lf: lf.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        ),
    )


def log_security_event(event_type: str, level: str, **attributes: Any) -> None:
    """Report a detected or resolved threat, e.g. ``brute_force_attack`` at ``high``."""
    _export(
        f"security event {event_type}",
        lambda lf: lf.warn("Security event", event_type=event_type, level=level, **attributes),
    )


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    _export(f"error {error_type}", lambda lf: lf.error(f"{error_type}: {error_message}", **(context or {})))
