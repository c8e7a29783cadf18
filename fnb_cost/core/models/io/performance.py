"""
Performance report I/O models: category cost trends, outlet efficiency and
property comparison.

Rankings list ids in rank order; the full figures live in the per-item lists.
"""

from __future__ import annotations

from datetime import date as date_type
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class DayValue(BaseModel):
    date: date_type
    value: float


class PeriodValue(BaseModel):
    period: str = Field(description="Monday of the week (YYYY-MM-DD) or the month (YYYY-MM)")
    value: float


class DayOfWeekPatternRead(BaseModel):
    averages: Dict[str, float]
    has_pattern: bool
    peak_days: List[str]
    low_days: List[str]


class CategoryOutletBreakdown(BaseModel):
    outlet_id: int
    outlet_name: str
    total_cost: float
    percentage: float
    trend: str


class CategoryTrend(BaseModel):
    category_id: int
    category_name: str
    category_type: str
    total_cost: float
    average_daily_cost: float
    days_with_cost: int
    trend: str
    trend_percentage: float
    volatility: float
    highest_day: Optional[DayValue] = None
    lowest_day: Optional[DayValue] = None
    weekly_totals: List[PeriodValue]
    monthly_totals: List[PeriodValue]
    outlet_breakdown: List[CategoryOutletBreakdown]
    day_of_week: DayOfWeekPatternRead
    previous_period_cost: float
    growth_percentage: float


class FamilyTotals(BaseModel):
    total_cost: float
    percentage: float
    category_count: int
    average_growth: float


class CategoryRankings(BaseModel):
    by_cost: List[int]
    by_growth: List[int]
    by_volatility: List[int]


class CategoryTrendsSummary(BaseModel):
    total_categories: int
    total_cost: float
    previous_period_cost: float
    total_growth: float
    performance: str
    food: FamilyTotals
    beverage: FamilyTotals
    top_category: Optional[str] = None
    fastest_growing: Optional[str] = None
    most_volatile: Optional[str] = None


class CategoryTrendsReport(BaseModel):
    report_title: str
    date_from: date_type
    date_to: date_type
    previous_from: date_type
    previous_to: date_type
    property_id: Optional[int] = None
    summary: CategoryTrendsSummary
    categories: List[CategoryTrend]
    rankings: CategoryRankings
    insights: List[str]
    key_findings: List[str]


class OutletEfficiency(BaseModel):
    outlet_id: int
    outlet_name: str
    outlet_code: str
    property_id: int
    property_name: str
    food_revenue: float
    beverage_revenue: float
    total_revenue: float
    food_cost: float
    beverage_cost: float
    total_cost: float
    gross_profit: float
    profit_margin: float
    revenue_cost_ratio: float
    food_cost_percentage: float
    beverage_cost_percentage: float
    budget_food_cost_percentage: float
    budget_beverage_cost_percentage: float
    food_cost_variance: float
    beverage_cost_variance: float
    days_with_cost: int
    average_daily_profit: float
    previous_revenue: float
    previous_cost: float
    revenue_growth: float
    cost_growth: float
    efficiency_trend: str
    efficiency_rating: str


class OutletRankings(BaseModel):
    by_margin: List[int]
    by_ratio: List[int]
    by_revenue: List[int]


class PropertyOutletAnalysis(BaseModel):
    property_id: int
    property_name: str
    outlet_count: int
    total_revenue: float
    total_cost: float
    profit_margin: float
    best_outlet: Optional[str] = None


class OutletEfficiencySummary(BaseModel):
    total_outlets: int
    total_revenue: float
    total_cost: float
    gross_profit: float
    average_margin: float
    average_ratio: float
    best_outlet: Optional[str] = None
    worst_outlet: Optional[str] = None
    ratings: Dict[str, int]


class OutletEfficiencyReport(BaseModel):
    report_title: str
    date_from: date_type
    date_to: date_type
    property_id: Optional[int] = None
    summary: OutletEfficiencySummary
    outlets: List[OutletEfficiency]
    rankings: OutletRankings
    property_analysis: List[PropertyOutletAnalysis]
    recommendations: List[str]


class PropertyPerformance(BaseModel):
    property_id: int
    property_name: str
    property_code: str
    property_type: str
    days_reported: int
    total_food_revenue: float
    total_beverage_revenue: float
    total_revenue: float
    total_food_cost: float
    total_beverage_cost: float
    total_cost: float
    gross_profit: float
    profit_margin: float
    food_cost_percentage: float
    beverage_cost_percentage: float
    overall_cost_percentage: float
    average_daily_revenue: float
    average_daily_cost: float
    budget_food_cost_percentage: float
    budget_beverage_cost_percentage: float
    food_cost_variance: float
    beverage_cost_variance: float
    active_outlets: int
    revenue_per_outlet: float
    revenue_cost_ratio: float
    previous_revenue: float
    previous_cost: float
    revenue_growth: float
    cost_growth: float
    performance_rating: str


class PropertyRankings(BaseModel):
    by_revenue: List[int]
    by_margin: List[int]
    by_efficiency: List[int]
    by_cost_control: List[int]


class PropertyPerformanceSummary(BaseModel):
    total_properties: int
    total_revenue: float
    total_cost: float
    gross_profit: float
    average_margin: float
    best_property: Optional[str] = None
    worst_property: Optional[str] = None


class PropertyPerformanceReport(BaseModel):
    report_title: str
    date_from: date_type
    date_to: date_type
    summary: PropertyPerformanceSummary
    properties: List[PropertyPerformance]
    rankings: PropertyRankings
