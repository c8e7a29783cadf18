"""
Outlet I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class OutletRead(BaseModel):
    """Schema for reading an outlet from API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    outlet_code: str
    property_id: int
    is_active: bool
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    outlet_type: Optional[str] = None
    currency: Optional[str] = None
    timezone: Optional[str] = None
    default_budget_food_cost_pct: Optional[float] = None
    default_budget_beverage_cost_pct: Optional[float] = None
    target_occupancy: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class OutletCreate(BaseModel):
    """Schema for creating an outlet via API."""

    name: str = Field(max_length=191)
    outlet_code: str = Field(max_length=64)
    property_id: int
    is_active: bool = True
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    outlet_type: Optional[str] = None
    currency: Optional[str] = None
    timezone: Optional[str] = None
    default_budget_food_cost_pct: Optional[float] = Field(default=None, ge=0, le=100)
    default_budget_beverage_cost_pct: Optional[float] = Field(default=None, ge=0, le=100)
    target_occupancy: Optional[float] = Field(default=None, ge=0, le=100)


class OutletUpdate(BaseModel):
    """Schema for updating an outlet via API. The owning property cannot change."""

    name: Optional[str] = None
    outlet_code: Optional[str] = None
    is_active: Optional[bool] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    outlet_type: Optional[str] = None
    currency: Optional[str] = None
    timezone: Optional[str] = None
    default_budget_food_cost_pct: Optional[float] = Field(default=None, ge=0, le=100)
    default_budget_beverage_cost_pct: Optional[float] = Field(default=None, ge=0, le=100)
    target_occupancy: Optional[float] = Field(default=None, ge=0, le=100)
