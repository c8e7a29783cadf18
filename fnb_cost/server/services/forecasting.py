"""
Predictive analytics report service.

Historical cost entries and daily summaries are turned into daily series and
projected forward with ``core.analytics.forecasting``. Revenue is recorded per
property, so an outlet's revenue series is that of its property.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from fnb_cost.core.analytics.forecasting import (
    ForecastPoint,
    forecast_series,
    growth_pct,
    margin_pct,
    mean,
    outlet_risk_level,
    summarize_series,
)
from fnb_cost.core.database.entities import DailyFinancialSummary, Outlet, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.reports import (
    CategoryForecastRead,
    ForecastPointRead,
    OutletForecastRead,
    PredictiveAnalyticsReport,
    PredictiveSummary,
    SeriesForecastRead,
    SplitForecast,
)

from .access import AccessControl
from .audit import AuditService

logger = get_logger(__name__)

DETAILED_REPORTS = "reports.detailed.read"
DEFAULT_FORECAST_DAYS = 30
RISK_WEIGHTS = {"High": 30, "Medium": 15, "Low": 5}


def daily_series(totals: Dict[date, float]) -> List[float]:
    """Values of the days that have data, oldest first."""
    return [totals[day] for day in sorted(totals)]


def _points(points: Iterable[ForecastPoint]) -> List[ForecastPointRead]:
    return [ForecastPointRead.model_validate(asdict(p)) for p in points]


def _sum_points(*series: List[ForecastPointRead]) -> List[ForecastPointRead]:
    """Point-wise sum of forecasts over the same days; confidence is averaged."""
    result = []
    for points in zip(*series):
        result.append(
            ForecastPointRead(
                date=points[0].date,
                predicted=sum(p.predicted for p in points),
                confidence=mean([p.confidence for p in points]),
                lower_bound=sum(p.lower_bound for p in points),
                upper_bound=sum(p.upper_bound for p in points),
            )
        )
    return result


def _total(points: List[ForecastPointRead]) -> float:
    return sum(p.predicted for p in points)


def outlet_recommendations(forecasted_margin: float, expected_growth: float, risk_level: str) -> List[str]:
    recommendations = []
    if forecasted_margin < 15:
        recommendations.append("Monitor cost control measures closely")
    if expected_growth < 0:
        recommendations.append("Implement revenue enhancement strategies")
    if risk_level == "High":
        recommendations.append("Review pricing and operational efficiency")
    return recommendations


def margin_trend(predicted: float, historical: float) -> str:
    if abs(predicted - historical) > 1:
        return "Improving" if predicted > historical else "Declining"
    return "Stable"


class ForecastingService:
    """Builds predictive analytics reports for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _scope(self, property_id: Optional[int]) -> Optional[List[int]]:
        if property_id is not None:
            await self.access.require_property_permission(property_id, DETAILED_REPORTS)
            return [property_id]
        self.access.require(DETAILED_REPORTS)
        return await self.access.accessible_property_ids()

    async def _cost_totals(
        self, start: date, end: date, property_ids: Optional[List[int]], outlet_id: Optional[int]
    ) -> Tuple[Dict[str, Dict[Tuple[int, date], float]], List[tuple]]:
        """Daily totals per outlet for both families, plus per-category rows."""
        per_outlet: Dict[str, Dict[Tuple[int, date], float]] = {}
        category_rows: List[tuple] = []
        for family, repo in (("food", self.repos.food_costs), ("beverage", self.repos.beverage_costs)):
            totals: Dict[Tuple[int, date], float] = defaultdict(float)
            for entry in await repo.list_in_range(start, end, outlet_id=outlet_id, property_ids=property_ids):
                totals[(entry.outlet_id, entry.date)] += entry.total_cost or 0.0
            per_outlet[family] = totals
            rows = await repo.category_totals(start, end, outlet_id=outlet_id, property_ids=property_ids)
            category_rows.extend(rows)
        return per_outlet, category_rows

    async def predictive_report(
        self,
        start: date,
        end: date,
        *,
        forecast_days: int = DEFAULT_FORECAST_DAYS,
        property_id: Optional[int] = None,
        outlet_id: Optional[int] = None,
    ) -> PredictiveAnalyticsReport:
        """Forecast costs per category and revenue and cost per outlet.

        Args:
            start: First historical day
            end: Last historical day
            forecast_days: Number of days to forecast after ``end``
            property_id: Restrict to one property
            outlet_id: Restrict to one outlet

        Returns:
            The report; forecasts start the day after ``end``
        """
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        if forecast_days < 1:
            raise ValidationFailedError("forecast_days must be positive")
        property_ids = await self._scope(property_id)
        forecast_from = end + timedelta(days=1)

        per_outlet, category_rows = await self._cost_totals(start, end, property_ids, outlet_id)
        summaries = await self.repos.daily_summaries.list_in_range(start, end, property_ids)
        outlets = await self.repos.outlets.list_for_properties(property_ids, active_only=True)
        if outlet_id is not None:
            outlets = [o for o in outlets if o.id == outlet_id]

        total_cost_by_day: Dict[date, float] = defaultdict(float)
        for totals in per_outlet.values():
            for (_, day), value in totals.items():
                total_cost_by_day[day] += value
        total_cost_forecast = summarize_series(daily_series(total_cost_by_day), forecast_from, forecast_days)

        category_forecasts = await self._category_forecasts(category_rows, forecast_from, forecast_days)
        outlet_forecasts = [
            self._outlet_forecast(outlet, per_outlet, summaries, forecast_from, forecast_days) for outlet in outlets
        ]

        summary = self._summary(summaries, outlet_forecasts, total_cost_forecast.confidence_level)
        overall_risk = mean([RISK_WEIGHTS[o.risk_level] for o in outlet_forecasts])
        logger.info(
            f"Predictive report for user {self.user.id}: {len(total_cost_by_day)} cost days, "
            f"{len(category_forecasts)} categories, {len(outlet_forecasts)} outlets"
        )
        return PredictiveAnalyticsReport(
            report_title="Predictive Analytics Report",
            date_from=start,
            date_to=end,
            forecast_from=forecast_from,
            forecast_to=forecast_from + timedelta(days=forecast_days - 1),
            property_id=property_id,
            summary=summary,
            total_cost_forecast=SeriesForecastRead.model_validate(asdict(total_cost_forecast)),
            category_forecasts=category_forecasts,
            outlet_forecasts=outlet_forecasts,
            overall_risk_score=overall_risk,
        )

    async def _category_forecasts(
        self, rows: List[tuple], forecast_from: date, forecast_days: int
    ) -> List[CategoryForecastRead]:
        by_category: Dict[int, Dict[date, float]] = defaultdict(lambda: defaultdict(float))
        names: Dict[int, str] = {}
        for day, _outlet, category_id, category_name, cost in rows:
            by_category[category_id][day] += float(cost or 0.0)
            names.setdefault(category_id, category_name or "Unknown")

        forecasts = []
        for category_id in sorted(by_category):
            category = await self.repos.categories.get_by_id(category_id)
            series = summarize_series(daily_series(by_category[category_id]), forecast_from, forecast_days)
            forecasts.append(
                CategoryForecastRead(
                    category_id=category_id,
                    category_name=category.name if category else names[category_id],
                    category_type=category.type if category else "Unknown",
                    **asdict(series),
                )
            )
        return forecasts

    @staticmethod
    def _outlet_forecast(
        outlet: Outlet,
        per_outlet: Dict[str, Dict[Tuple[int, date], float]],
        summaries: List[DailyFinancialSummary],
        forecast_from: date,
        forecast_days: int,
    ) -> OutletForecastRead:
        own = [s for s in summaries if s.property_id == outlet.property_id]
        food_revenue = _points(forecast_series([s.actual_food_revenue or 0.0 for s in own], forecast_from, forecast_days))
        beverage_revenue = _points(
            forecast_series([s.actual_beverage_revenue or 0.0 for s in own], forecast_from, forecast_days)
        )

        costs = {}
        for family, totals in per_outlet.items():
            days = {day: value for (oid, day), value in totals.items() if oid == outlet.id}
            costs[family] = _points(forecast_series(daily_series(days), forecast_from, forecast_days))

        revenue = SplitForecast(
            food=food_revenue, beverage=beverage_revenue, total=_sum_points(food_revenue, beverage_revenue)
        )
        cost = SplitForecast(
            food=costs["food"], beverage=costs["beverage"], total=_sum_points(costs["food"], costs["beverage"])
        )

        forecasted_revenue = _total(revenue.total)
        forecasted_margin = margin_pct(forecasted_revenue, _total(cost.total))
        historical_daily = mean([(s.actual_food_revenue or 0.0) + (s.actual_beverage_revenue or 0.0) for s in own])
        expected_growth = growth_pct(forecasted_revenue, historical_daily * forecast_days)
        risk = outlet_risk_level(forecasted_margin)
        return OutletForecastRead(
            outlet_id=outlet.id,
            outlet_name=outlet.name,
            revenue_forecast=revenue,
            cost_forecast=cost,
            forecasted_margin=forecasted_margin,
            expected_growth=expected_growth,
            risk_level=risk,
            recommendations=outlet_recommendations(forecasted_margin, expected_growth, risk),
        )

    @staticmethod
    def _summary(
        summaries: List[DailyFinancialSummary], outlets: List[OutletForecastRead], confidence: float
    ) -> PredictiveSummary:
        historical_revenue = sum((s.actual_food_revenue or 0.0) + (s.actual_beverage_revenue or 0.0) for s in summaries)
        historical_costs = sum((s.actual_food_cost or 0.0) + (s.actual_beverage_cost or 0.0) for s in summaries)
        forecasted_revenue = sum(_total(o.revenue_forecast.total) for o in outlets)
        forecasted_costs = sum(_total(o.cost_forecast.total) for o in outlets)

        revenue_growth = growth_pct(forecasted_revenue, historical_revenue)
        cost_growth = growth_pct(forecasted_costs, historical_costs)
        predicted_margin = margin_pct(forecasted_revenue, forecasted_costs)

        insights: List[str] = []
        alerts: List[str] = []
        if revenue_growth > 10:
            insights.append("Strong revenue growth predicted - prepare for increased demand")
        if cost_growth > 8:
            alerts.append("Cost inflation above normal levels - review pricing strategy")
        if predicted_margin < 15:
            alerts.append("Margin pressure detected - implement cost control measures")

        return PredictiveSummary(
            total_historical_revenue=historical_revenue,
            forecasted_revenue=forecasted_revenue,
            revenue_growth_prediction=revenue_growth,
            total_historical_costs=historical_costs,
            forecasted_costs=forecasted_costs,
            cost_growth_prediction=cost_growth,
            predicted_margin=predicted_margin,
            margin_trend=margin_trend(predicted_margin, margin_pct(historical_revenue, historical_costs)),
            confidence_level=confidence,
            key_insights=insights,
            critical_alerts=alerts,
        )
