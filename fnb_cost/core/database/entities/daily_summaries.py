"""
Daily financial summary entity models.

One row per property and business day holding revenue, budget and cost
adjustments. The ``actual_*`` and ``*_variance_pct`` columns are derived from
the day's cost entries and are rewritten whenever those entries change.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class DailyFinancialSummary(Base, table=True):
    """Entity for per-property daily revenue, budget and derived cost figures.

    Table: daily_financial_summaries
    """

    __tablename__ = "daily_financial_summaries"
    __table_args__ = (
        UniqueConstraint("date", "property_id", name="uq_daily_financial_summaries_date_property"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    date: date_type = Field(index=True)
    property_id: int = Field(foreign_key="properties.id", index=True)

    # Revenue and budget inputs
    actual_food_revenue: float = Field(default=0.0)
    budget_food_revenue: float = Field(default=0.0)
    actual_beverage_revenue: float = Field(default=0.0)
    budget_beverage_revenue: float = Field(default=0.0)
    budget_food_cost: float = Field(default=0.0)
    budget_beverage_cost: float = Field(default=0.0)
    budget_food_cost_pct: float = Field(default=0.0)
    budget_beverage_cost_pct: float = Field(default=0.0)

    # Cost adjustments: entertainment, officer checks/comps, other
    ent_food: float = Field(default=0.0)
    co_food: float = Field(default=0.0)
    other_food_adjustment: float = Field(default=0.0)
    ent_beverage: float = Field(default=0.0)
    co_beverage: float = Field(default=0.0)
    other_beverage_adjustment: float = Field(default=0.0)

    total_covers: float = Field(default=0.0)
    average_check: float = Field(default=0.0)
    note: Optional[str] = Field(default=None, max_length=1000)

    # Derived from cost entries
    actual_food_cost: Optional[float] = Field(default=None)
    actual_food_cost_pct: Optional[float] = Field(default=None)
    food_variance_pct: Optional[float] = Field(default=None)
    actual_beverage_cost: Optional[float] = Field(default=None)
    actual_beverage_cost_pct: Optional[float] = Field(default=None)
    beverage_variance_pct: Optional[float] = Field(default=None)

    created_by: Optional[int] = Field(default=None, foreign_key="users.id")
    updated_by: Optional[int] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"DailyFinancialSummary(id={self.id}, date={self.date}, property_id={self.property_id})"
