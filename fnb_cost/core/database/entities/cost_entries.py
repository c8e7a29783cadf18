"""
Food and beverage cost entry entity models.

A cost entry records one outlet's cost for one business day; its details split
that cost across categories. The food and beverage families share a layout so
the same service code can operate on either pair of tables.

Tables:
- food_cost_entries / food_cost_details
- beverage_cost_entries / beverage_cost_details
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, utc_now


class CostEntryBase(Base):
    """Fields shared by food and beverage cost entries."""

    date: date_type = Field(index=True)
    outlet_id: int = Field(foreign_key="outlets.id", index=True)
    property_id: int = Field(foreign_key="properties.id", index=True)
    total_cost: float = Field(default=0.0)

    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    updated_by: Optional[int] = Field(default=None, foreign_key="users.id")


class CostDetailBase(Base):
    """Fields shared by food and beverage cost details."""

    category_id: int = Field(foreign_key="categories.id", index=True)
    category_name: Optional[str] = Field(default=None, max_length=191)
    cost: float = Field(default=0.0)
    description: Optional[str] = Field(default=None, max_length=255)


class FoodCostEntry(CostEntryBase, table=True):
    """Daily food cost for one outlet.

    Table: food_cost_entries
    """

    __tablename__ = "food_cost_entries"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"FoodCostEntry(id={self.id}, date={self.date}, outlet_id={self.outlet_id}, total={self.total_cost})"


class FoodCostDetail(CostDetailBase, table=True):
    """Category line of a food cost entry.

    Table: food_cost_details
    """

    __tablename__ = "food_cost_details"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    entry_id: int = Field(foreign_key="food_cost_entries.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"FoodCostDetail(id={self.id}, entry_id={self.entry_id}, cost={self.cost})"


class BeverageCostEntry(CostEntryBase, table=True):
    """Daily beverage cost for one outlet.

    Table: beverage_cost_entries
    """

    __tablename__ = "beverage_cost_entries"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"BeverageCostEntry(id={self.id}, date={self.date}, outlet_id={self.outlet_id}, total={self.total_cost})"


class BeverageCostDetail(CostDetailBase, table=True):
    """Category line of a beverage cost entry.

    Table: beverage_cost_details
    """

    __tablename__ = "beverage_cost_details"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    entry_id: int = Field(foreign_key="beverage_cost_entries.id", index=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"BeverageCostDetail(id={self.id}, entry_id={self.entry_id}, cost={self.cost})"
