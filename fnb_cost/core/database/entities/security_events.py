"""
Security event entity models.

Persisted security threats. Detected threats that were stored here are merged
into the security dashboard until resolved; resolution time feeds the
average-resolution metric.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class SecurityEvent(Base, table=True):
    """Entity for persisted security threats.

    Table: security_events
    """

    __tablename__ = "security_events"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    type: str = Field(max_length=64, index=True)
    severity: str = Field(max_length=16)
    description: str = Field(max_length=512)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id")
    property_id: Optional[int] = Field(default=None, foreign_key="properties.id")
    ip: Optional[str] = Field(default=None, max_length=64)
    event_metadata: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    timestamp: datetime = Field(default_factory=utc_now, index=True)
    resolved: bool = Field(default=False, index=True)
    resolved_at: Optional[datetime] = Field(default=None)
    resolved_by: Optional[int] = Field(default=None, foreign_key="users.id")
    resolution: Optional[str] = Field(default=None, max_length=1000)

    def __repr__(self) -> str:
        return f"SecurityEvent(id={self.id}, type={self.type}, severity={self.severity}, resolved={self.resolved})"
