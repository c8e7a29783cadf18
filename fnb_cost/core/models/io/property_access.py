"""
Property access I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import PropertyAccessLevel


class PropertyAccessRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    property_id: int
    access_level: PropertyAccessLevel
    granted_by: Optional[int] = None
    granted_at: datetime
    expires_at: Optional[datetime] = None


class PropertyAccessGrant(BaseModel):
    """Grant (or replace) a user's access to a property."""

    user_id: int
    property_id: int
    access_level: PropertyAccessLevel
    expires_at: Optional[datetime] = None


class PropertyAccessUpdate(BaseModel):
    access_level: Optional[PropertyAccessLevel] = None
    expires_at: Optional[datetime] = None


class BulkAccessGrant(BaseModel):
    """Grant one access level on one property to several users."""

    user_ids: List[int] = Field(min_length=1)
    property_id: int
    access_level: PropertyAccessLevel
    expires_at: Optional[datetime] = None


class BulkGrantFailure(BaseModel):
    user_id: int
    error: str


class BulkGrantResult(BaseModel):
    granted: List[PropertyAccessRead]
    failed: List[BulkGrantFailure]


class AccessCleanupResult(BaseModel):
    deleted_count: int
