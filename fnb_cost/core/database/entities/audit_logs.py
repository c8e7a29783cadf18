"""
Audit log entity models.

Append-only record of user and system actions. Rows are written by the
audit service and read by the audit log views, the CSV export and the
security analytics.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class AuditLog(Base, table=True):
    """Entity for audit trail rows.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    property_id: Optional[int] = Field(default=None, foreign_key="properties.id", index=True)
    action: str = Field(max_length=64, index=True)
    resource: str = Field(max_length=64, index=True)
    resource_id: Optional[str] = Field(default=None, max_length=128)
    details: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)

    timestamp: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"AuditLog(id={self.id}, action={self.action}, resource={self.resource}, user_id={self.user_id})"
