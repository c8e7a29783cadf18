"""Shared SQLModel base and the UTC clock used for every timestamp column."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import ConfigDict
from sqlmodel import SQLModel


class Base(SQLModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the stored column type."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
