"""
Daily financial summary I/O models for API requests and responses.

Only revenue, budget and adjustment inputs are writable. The ``actual_*`` and
``*_variance_pct`` fields are derived from cost entries and exposed read-only.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DailySummaryInput(BaseModel):
    """Writable fields shared by create and update."""

    actual_food_revenue: Optional[float] = None
    budget_food_revenue: Optional[float] = None
    actual_beverage_revenue: Optional[float] = None
    budget_beverage_revenue: Optional[float] = None
    budget_food_cost: Optional[float] = None
    budget_beverage_cost: Optional[float] = None
    budget_food_cost_pct: Optional[float] = None
    budget_beverage_cost_pct: Optional[float] = None
    ent_food: Optional[float] = None
    co_food: Optional[float] = None
    other_food_adjustment: Optional[float] = None
    ent_beverage: Optional[float] = None
    co_beverage: Optional[float] = None
    other_beverage_adjustment: Optional[float] = None
    total_covers: Optional[float] = None
    average_check: Optional[float] = None
    note: Optional[str] = Field(default=None, max_length=1000)


class DailySummaryCreate(DailySummaryInput):
    """Create or replace the summary for one property and day."""

    date: date_type
    property_id: Optional[int] = Field(
        default=None, description="Required for super admins; defaults to the caller's first property otherwise"
    )


class DailySummaryUpdate(DailySummaryInput):
    date: Optional[date_type] = None


class DailySummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date_type
    property_id: int
    actual_food_revenue: float
    budget_food_revenue: float
    actual_beverage_revenue: float
    budget_beverage_revenue: float
    budget_food_cost: float
    budget_beverage_cost: float
    budget_food_cost_pct: float
    budget_beverage_cost_pct: float
    ent_food: float
    co_food: float
    other_food_adjustment: float
    ent_beverage: float
    co_beverage: float
    other_beverage_adjustment: float
    total_covers: float
    average_check: float
    note: Optional[str] = None
    actual_food_cost: Optional[float] = None
    actual_food_cost_pct: Optional[float] = None
    food_variance_pct: Optional[float] = None
    actual_beverage_cost: Optional[float] = None
    actual_beverage_cost_pct: Optional[float] = None
    beverage_variance_pct: Optional[float] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class DailySummaryPage(BaseModel):
    """One page of summaries, newest first."""

    items: List[DailySummaryRead]
    has_more: bool
    next_cursor: Optional[int] = Field(default=None, description="Pass as ``cursor`` to fetch the next page")
    total_count: int
