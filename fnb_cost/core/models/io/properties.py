"""
Property I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.enums import PropertyType


class PropertyRead(BaseModel):
    """Schema for reading a property from API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    property_code: str = Field(description="Unique short code")
    property_type: PropertyType
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    currency_id: Optional[int] = None
    owner_id: Optional[int] = None
    manager_id: Optional[int] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PropertyCreate(BaseModel):
    """Schema for creating a property via API.

    When ``owner_id`` is omitted the caller becomes the owner.
    """

    name: str = Field(max_length=191)
    property_code: str = Field(max_length=64)
    property_type: PropertyType = Field(default=PropertyType.restaurant)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    currency_id: Optional[int] = Field(default=None, description="Defaults to the default currency")
    owner_id: Optional[int] = None
    manager_id: Optional[int] = None
    is_active: bool = True


class PropertyUpdate(BaseModel):
    """Schema for updating a property via API."""

    name: Optional[str] = None
    property_code: Optional[str] = None
    property_type: Optional[PropertyType] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    currency_id: Optional[int] = None
    manager_id: Optional[int] = None
    is_active: Optional[bool] = None


class OwnershipTransfer(BaseModel):
    new_owner_id: int = Field(description="User who becomes the property owner")
