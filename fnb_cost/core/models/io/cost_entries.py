"""
Cost entry I/O models for API requests and responses.

The same schemas serve food and beverage entries. Detail costs and the
presence of at least one detail are checked by the cost entry service so the
rule holds for every caller, not only the HTTP API.
"""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CostDetailInput(BaseModel):
    """One category line of a cost entry."""

    category_id: int
    cost: float = Field(description="Cost for the category; must not be negative")
    description: Optional[str] = Field(default=None, max_length=255)


class CostDetailRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    category_name: Optional[str] = None
    cost: float
    description: Optional[str] = None


class CostEntryCreate(BaseModel):
    """Schema for saving a food or beverage cost entry."""

    date: date_type = Field(description="Business day of the cost")
    outlet_id: int
    details: List[CostDetailInput] = Field(default_factory=list)


class CostEntryUpdate(BaseModel):
    """Schema for updating a cost entry. ``details`` replaces all lines when given."""

    date: Optional[date_type] = None
    outlet_id: Optional[int] = None
    details: Optional[List[CostDetailInput]] = None


class CostEntryRead(BaseModel):
    """Schema for reading a cost entry with its details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    date: date_type
    outlet_id: int
    property_id: int
    total_cost: float
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    details: List[CostDetailRead] = Field(default_factory=list)


class CategoryCost(BaseModel):
    category_name: str
    total_cost: float


class CostItem(BaseModel):
    category_name: str
    description: str
    cost: float


class OutletCostReport(BaseModel):
    """Cost breakdown for one outlet, or for all outlets when ``outlet_id`` is ``"all"``.

    Revenue and adjustment fields are only known per property, so outlet rows
    carry zeros and the overall row carries the aggregated figures.
    """

    outlet_id: str
    outlet_name: str
    date_from: date_type
    date_to: date_type
    category_costs: List[CategoryCost]
    total_cost_from_transfers: float
    other_adjustments: float = 0.0
    oc_total: float = 0.0
    ent_total: float = 0.0
    total_cost: float
    total_revenue: float = 0.0
    cost_percentage: float = 0.0
    budget_cost_percentage: float = 0.0
    variance_percentage: float = 0.0
    cost_details_by_item: List[CostItem] = Field(default_factory=list)


class DetailedCostReport(BaseModel):
    outlet_reports: List[OutletCostReport]
    overall_summary_report: OutletCostReport
