"""
Property access entity models.

Grants a user a scoped access level on one property. A grant may carry an
expiry; expired grants are ignored by access checks and removed by cleanup.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class PropertyAccess(Base, table=True):
    """Entity for per-property access grants.

    Table: property_access
    """

    __tablename__ = "property_access"
    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_property_access_user_property"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="users.id", index=True)
    property_id: int = Field(foreign_key="properties.id", index=True)
    access_level: str = Field(max_length=32)

    granted_by: Optional[int] = Field(default=None, foreign_key="users.id")
    granted_at: datetime = Field(default_factory=utc_now)
    expires_at: Optional[datetime] = Field(default=None)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Whether the grant has passed its expiry time."""
        return self.expires_at is not None and self.expires_at <= (now or utc_now())

    def __repr__(self) -> str:
        return f"PropertyAccess(user_id={self.user_id}, property_id={self.property_id}, level={self.access_level})"
