"""
Financial Report Endpoints.

Monthly profit and loss, budget vs actuals, predictive analytics and the
category, outlet and property performance reports, all built from daily
summaries and cost entries.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.performance import CategoryTrendsReport, OutletEfficiencyReport, PropertyPerformanceReport
from fnb_cost.core.models.io.reports import BudgetVsActuals, MonthlyProfitLoss, PredictiveAnalyticsReport
from fnb_cost.server.services.deps import ForecastingServiceDep, PerformanceReportServiceDep, ReportServiceDep
from fnb_cost.server.services.forecasting import DEFAULT_FORECAST_DAYS

logger = get_logger(__name__)

router = APIRouter(tags=["reports"])


@router.get(
    "/monthly-pnl",
    response_model=MonthlyProfitLoss,
    summary="Monthly Profit and Loss",
    description="Revenue, actual cost, gross profit and cost percentages over one calendar month.",
    response_description="The month's P&L.",
)
async def monthly_profit_loss(
    reports: ReportServiceDep,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    property_id: Optional[int] = Query(None),
) -> MonthlyProfitLoss:
    return await reports.monthly_profit_loss(year, month, property_id=property_id)


@router.get(
    "/budget-vs-actuals",
    response_model=BudgetVsActuals,
    summary="Budget vs Actuals",
    description="Budget against actual revenue and cost for food, beverage and combined, with a daily breakdown and performance indicators.",
    response_description="The comparison report.",
)
async def budget_vs_actuals(
    reports: ReportServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    property_id: Optional[int] = Query(None),
) -> BudgetVsActuals:
    return await reports.budget_vs_actuals(start, end, property_id=property_id)


@router.get(
    "/predictive",
    response_model=PredictiveAnalyticsReport,
    summary="Predictive Analytics",
    description=(
        "Trend and day-of-week seasonality forecasts of total, per-category and per-outlet figures. "
        "Forecasts start the day after the historical range."
    ),
    response_description="The forecast report.",
)
async def predictive_analytics(
    forecasting: ForecastingServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    forecast_days: int = Query(DEFAULT_FORECAST_DAYS, ge=1, le=365),
    property_id: Optional[int] = Query(None),
    outlet_id: Optional[int] = Query(None),
) -> PredictiveAnalyticsReport:
    return await forecasting.predictive_report(
        start, end, forecast_days=forecast_days, property_id=property_id, outlet_id=outlet_id
    )


@router.get(
    "/category-trends",
    response_model=CategoryTrendsReport,
    summary="Category Performance Trends",
    description=(
        "Daily cost trend, volatility, weekday pattern and outlet split of every category, "
        "compared with the period of the same length before the range."
    ),
    response_description="The category trends report.",
)
async def category_trends(
    performance: PerformanceReportServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    property_id: Optional[int] = Query(None),
    outlet_id: Optional[int] = Query(None),
) -> CategoryTrendsReport:
    return await performance.category_trends(start, end, property_id=property_id, outlet_id=outlet_id)


@router.get(
    "/outlet-efficiency",
    response_model=OutletEfficiencyReport,
    summary="Outlet Efficiency and Profitability",
    description=(
        "Revenue, cost, margin and efficiency rating of every active outlet. An outlet's revenue is its "
        "property's revenue split by the outlet's share of cost."
    ),
    response_description="The outlet efficiency report.",
    responses={400: {"description": "No active outlets in scope"}},
)
async def outlet_efficiency(
    performance: PerformanceReportServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    property_id: Optional[int] = Query(None),
) -> OutletEfficiencyReport:
    return await performance.outlet_efficiency(start, end, property_id=property_id)


@router.get(
    "/property-performance",
    response_model=PropertyPerformanceReport,
    summary="Property Performance Comparison",
    description="Side-by-side revenue, cost, margin and budget variance of every active property the caller can access.",
    response_description="The property comparison.",
)
async def property_performance(
    performance: PerformanceReportServiceDep,
    start: date = Query(...),
    end: date = Query(...),
) -> PropertyPerformanceReport:
    return await performance.property_performance(start, end)
