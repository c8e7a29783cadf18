"""
User entity models.

This module contains the database entity for application users. A user's
global role selects a permission set; explicit extra permissions are stored
as a JSON list on the row.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlmodel import JSON, Field

from ..base import Base, utc_now


class User(Base, table=True):
    """Entity for application users.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    name: Optional[str] = Field(default=None, max_length=191)
    email: str = Field(max_length=191, unique=True, index=True)
    password_hash: Optional[str] = Field(default=None, max_length=255)

    role: str = Field(default="user", max_length=32, index=True)
    is_active: bool = Field(default=True)
    department: Optional[str] = Field(default=None, max_length=191)
    phone_number: Optional[str] = Field(default=None, max_length=64)
    permissions: List[str] = Field(default_factory=list, sa_type=JSON)

    last_login_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"
