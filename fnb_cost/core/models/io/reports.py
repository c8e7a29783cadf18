"""
Financial report I/O models: monthly P&L, budget vs actuals and predictive analytics.
"""

from __future__ import annotations

from datetime import date as date_type
from typing import List, Optional

from pydantic import BaseModel, Field


class MonthlyProfitLoss(BaseModel):
    month_year: str = Field(description='Display label such as "March 2025"')
    total_food_revenue: float
    total_beverage_revenue: float
    total_revenue: float
    total_actual_food_cost: float
    total_actual_beverage_cost: float
    total_actual_cost: float
    gross_profit: float
    food_cost_percentage: float
    beverage_cost_percentage: float
    overall_cost_percentage: float
    average_budget_food_cost_pct: float
    average_budget_beverage_cost_pct: float


class BudgetFigures(BaseModel):
    revenue: float
    cost_pct: float
    cost: float


class ActualFigures(BaseModel):
    revenue: float
    cost: float
    cost_pct: float


class VarianceFigures(BaseModel):
    revenue_variance: float
    revenue_variance_pct: float
    cost_variance: float
    cost_variance_pct: float
    cost_pct_variance: float


class BudgetActualBlock(BaseModel):
    budget: BudgetFigures
    actual: ActualFigures
    variance: VarianceFigures


class DailyBudgetActual(BaseModel):
    date: date_type
    budget_food_revenue: float
    actual_food_revenue: float
    budget_food_cost: float
    actual_food_cost: float
    budget_beverage_revenue: float
    actual_beverage_revenue: float
    budget_beverage_cost: float
    actual_beverage_cost: float


class PerformanceIndicators(BaseModel):
    food_revenue_achievement: float
    beverage_revenue_achievement: float
    food_cost_control: float
    beverage_cost_control: float
    overall_performance: float


class BudgetVsActuals(BaseModel):
    date_from: date_type
    date_to: date_type
    property_id: Optional[int] = None
    food: BudgetActualBlock
    beverage: BudgetActualBlock
    combined: BudgetActualBlock
    daily_breakdown: List[DailyBudgetActual]
    performance_indicators: PerformanceIndicators


class ForecastPointRead(BaseModel):
    date: date_type
    predicted: float
    confidence: float
    lower_bound: float
    upper_bound: float


class SeriesForecastRead(BaseModel):
    historical_average: float
    historical_trend: str
    seasonality_pattern: str
    peak_periods: List[str]
    low_periods: List[str]
    forecast: List[ForecastPointRead]
    accuracy: float
    volatility: float
    confidence_level: float
    risk_factors: List[str]
    opportunities: List[str]


class CategoryForecastRead(SeriesForecastRead):
    category_id: int
    category_name: str
    category_type: str


class SplitForecast(BaseModel):
    food: List[ForecastPointRead]
    beverage: List[ForecastPointRead]
    total: List[ForecastPointRead]


class OutletForecastRead(BaseModel):
    outlet_id: int
    outlet_name: str
    revenue_forecast: SplitForecast
    cost_forecast: SplitForecast
    forecasted_margin: float
    expected_growth: float
    risk_level: str
    recommendations: List[str]


class PredictiveSummary(BaseModel):
    total_historical_revenue: float
    forecasted_revenue: float
    revenue_growth_prediction: float
    total_historical_costs: float
    forecasted_costs: float
    cost_growth_prediction: float
    predicted_margin: float
    margin_trend: str
    confidence_level: float
    key_insights: List[str]
    critical_alerts: List[str]


class PredictiveAnalyticsReport(BaseModel):
    report_title: str
    date_from: date_type
    date_to: date_type
    forecast_from: date_type
    forecast_to: date_type
    property_id: Optional[int] = None
    summary: PredictiveSummary
    total_cost_forecast: SeriesForecastRead
    category_forecasts: List[CategoryForecastRead]
    outlet_forecasts: List[OutletForecastRead]
    overall_risk_score: float
