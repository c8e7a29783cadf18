"""
User I/O models for API requests and responses.

Passwords only travel inbound; ``UserRead`` never exposes the stored hash.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import UserRole


class UserRead(BaseModel):
    """Schema for reading a user from API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = Field(default=None, description="Display name")
    email: str = Field(description="Unique login email")
    role: UserRole = Field(description="Global role")
    is_active: bool = Field(description="Whether the account can be used")
    department: Optional[str] = None
    phone_number: Optional[str] = None
    permissions: List[str] = Field(default_factory=list, description="Explicit extra permissions")
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    """Schema for creating a user via API."""

    name: Optional[str] = Field(default=None, max_length=191)
    email: str = Field(max_length=191, description="Unique login email")
    password: Optional[str] = Field(default=None, min_length=8, description="Initial password")
    role: UserRole = Field(default=UserRole.user)
    is_active: bool = Field(default=True)
    department: Optional[str] = None
    phone_number: Optional[str] = None
    permissions: List[str] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Schema for updating a user via API."""

    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    department: Optional[str] = None
    phone_number: Optional[str] = None
    permissions: Optional[List[str]] = None


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=8, description="Replacement password")


class UserStatistics(BaseModel):
    """User counts for the administration dashboard."""

    total_users: int
    active_users: int
    inactive_users: int
    users_by_role: Dict[str, int]


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Bearer token for the ``Authorization`` header of later requests."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserRead
