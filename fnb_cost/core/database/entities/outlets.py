"""
Outlet entity models.

An outlet is a point of sale inside a property (restaurant, bar, room
service...). Cost entries are recorded per outlet.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class Outlet(Base, table=True):
    """Entity for property outlets.

    Table: outlets
    """

    __tablename__ = "outlets"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)

    name: str = Field(max_length=191)
    outlet_code: str = Field(max_length=64, index=True)
    property_id: int = Field(foreign_key="properties.id", index=True)
    is_active: bool = Field(default=True)

    address: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=64)
    email: Optional[str] = Field(default=None, max_length=191)
    outlet_type: Optional[str] = Field(default=None, max_length=64)
    currency: Optional[str] = Field(default=None, max_length=8)
    timezone: Optional[str] = Field(default=None, max_length=64)

    default_budget_food_cost_pct: Optional[float] = Field(default=None)
    default_budget_beverage_cost_pct: Optional[float] = Field(default=None)
    target_occupancy: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Outlet(id={self.id}, code={self.outlet_code}, property_id={self.property_id})"
