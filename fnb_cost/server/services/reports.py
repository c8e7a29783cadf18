"""
Financial report service: monthly profit and loss, budget vs actuals.

Both reports aggregate daily financial summaries. A property filter narrows the
data to one property; without it the report spans every property the caller
can access.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import List, Optional, Sequence

from fnb_cost.core.database.entities import DailyFinancialSummary, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.reports import (
    ActualFigures,
    BudgetActualBlock,
    BudgetFigures,
    BudgetVsActuals,
    DailyBudgetActual,
    MonthlyProfitLoss,
    PerformanceIndicators,
    VarianceFigures,
)

from .access import AccessControl
from .audit import AuditService
from .daily_summaries import cost_percentage

logger = get_logger(__name__)

FINANCIAL_REPORTS = "reports.financial.read"


def _ratio_pct(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def average_positive(values: Sequence[Optional[float]]) -> float:
    positive = [v for v in values if v and v > 0]
    return sum(positive) / len(positive) if positive else 0.0


def budgeted_cost(summary: DailyFinancialSummary, family: str) -> float:
    """Budgeted cost of one day; derived from revenue and pct when not entered."""
    cost = getattr(summary, f"budget_{family}_cost") or 0.0
    if cost:
        return cost
    revenue = getattr(summary, f"budget_{family}_revenue") or 0.0
    pct = getattr(summary, f"budget_{family}_cost_pct") or 0.0
    return revenue * pct / 100


def budget_actual_block(
    budget_revenue: float, budget_cost: float, actual_revenue: float, actual_cost: float
) -> BudgetActualBlock:
    budget_pct = cost_percentage(budget_cost, budget_revenue)
    actual_pct = cost_percentage(actual_cost, actual_revenue)
    revenue_variance = actual_revenue - budget_revenue
    cost_variance = actual_cost - budget_cost
    return BudgetActualBlock(
        budget=BudgetFigures(revenue=budget_revenue, cost_pct=budget_pct, cost=budget_cost),
        actual=ActualFigures(revenue=actual_revenue, cost=actual_cost, cost_pct=actual_pct),
        variance=VarianceFigures(
            revenue_variance=revenue_variance,
            revenue_variance_pct=_ratio_pct(revenue_variance, budget_revenue),
            cost_variance=cost_variance,
            cost_variance_pct=_ratio_pct(cost_variance, budget_cost),
            cost_pct_variance=actual_pct - budget_pct,
        ),
    )


def performance_indicators(food: BudgetActualBlock, beverage: BudgetActualBlock) -> PerformanceIndicators:
    """Revenue achievement and cost control, both relative to budget (100 = on budget).

    Overall performance rewards achievement above 100 and cost control below 100.
    """
    food_achievement = _ratio_pct(food.actual.revenue, food.budget.revenue)
    beverage_achievement = _ratio_pct(beverage.actual.revenue, beverage.budget.revenue)
    food_control = _ratio_pct(food.actual.cost_pct, food.budget.cost_pct)
    beverage_control = _ratio_pct(beverage.actual.cost_pct, beverage.budget.cost_pct)

    achievement = (food_achievement + beverage_achievement) / 2
    control = (food_control + beverage_control) / 2
    return PerformanceIndicators(
        food_revenue_achievement=food_achievement,
        beverage_revenue_achievement=beverage_achievement,
        food_cost_control=food_control,
        beverage_cost_control=beverage_control,
        overall_performance=(achievement + (200 - control)) / 2,
    )


class ReportService:
    """Summary-based financial reports for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _summaries(
        self, start: date, end: date, property_id: Optional[int]
    ) -> List[DailyFinancialSummary]:
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        if property_id is not None:
            await self.access.require_property_permission(property_id, FINANCIAL_REPORTS)
            property_ids: Optional[List[int]] = [property_id]
        else:
            self.access.require(FINANCIAL_REPORTS)
            property_ids = await self.access.accessible_property_ids()
        return await self.repos.daily_summaries.list_in_range(start, end, property_ids)

    async def monthly_profit_loss(
        self, year: int, month: int, *, property_id: Optional[int] = None
    ) -> MonthlyProfitLoss:
        """Profit and loss over every summary of one calendar month."""
        if not 1 <= month <= 12:
            raise ValidationFailedError("month must be between 1 and 12")
        last_day = calendar.monthrange(year, month)[1]
        summaries = await self._summaries(date(year, month, 1), date(year, month, last_day), property_id)

        food_revenue = sum(s.actual_food_revenue or 0.0 for s in summaries)
        beverage_revenue = sum(s.actual_beverage_revenue or 0.0 for s in summaries)
        food_cost = sum(s.actual_food_cost or 0.0 for s in summaries)
        beverage_cost = sum(s.actual_beverage_cost or 0.0 for s in summaries)
        total_revenue = food_revenue + beverage_revenue
        total_cost = food_cost + beverage_cost

        logger.debug(f"Monthly P&L {year}-{month:02d}: {len(summaries)} summaries")
        return MonthlyProfitLoss(
            month_year=f"{calendar.month_name[month]} {year}",
            total_food_revenue=food_revenue,
            total_beverage_revenue=beverage_revenue,
            total_revenue=total_revenue,
            total_actual_food_cost=food_cost,
            total_actual_beverage_cost=beverage_cost,
            total_actual_cost=total_cost,
            gross_profit=total_revenue - total_cost,
            food_cost_percentage=cost_percentage(food_cost, food_revenue),
            beverage_cost_percentage=cost_percentage(beverage_cost, beverage_revenue),
            overall_cost_percentage=cost_percentage(total_cost, total_revenue),
            average_budget_food_cost_pct=average_positive([s.budget_food_cost_pct for s in summaries]),
            average_budget_beverage_cost_pct=average_positive([s.budget_beverage_cost_pct for s in summaries]),
        )

    async def budget_vs_actuals(
        self, start: date, end: date, *, property_id: Optional[int] = None
    ) -> BudgetVsActuals:
        """Budget against actual revenue and cost for food, beverage and both."""
        summaries = await self._summaries(start, end, property_id)

        daily: List[DailyBudgetActual] = []
        for s in summaries:
            daily.append(
                DailyBudgetActual(
                    date=s.date,
                    budget_food_revenue=s.budget_food_revenue or 0.0,
                    actual_food_revenue=s.actual_food_revenue or 0.0,
                    budget_food_cost=budgeted_cost(s, "food"),
                    actual_food_cost=s.actual_food_cost or 0.0,
                    budget_beverage_revenue=s.budget_beverage_revenue or 0.0,
                    actual_beverage_revenue=s.actual_beverage_revenue or 0.0,
                    budget_beverage_cost=budgeted_cost(s, "beverage"),
                    actual_beverage_cost=s.actual_beverage_cost or 0.0,
                )
            )

        food = budget_actual_block(
            sum(d.budget_food_revenue for d in daily),
            sum(d.budget_food_cost for d in daily),
            sum(d.actual_food_revenue for d in daily),
            sum(d.actual_food_cost for d in daily),
        )
        beverage = budget_actual_block(
            sum(d.budget_beverage_revenue for d in daily),
            sum(d.budget_beverage_cost for d in daily),
            sum(d.actual_beverage_revenue for d in daily),
            sum(d.actual_beverage_cost for d in daily),
        )
        combined = budget_actual_block(
            food.budget.revenue + beverage.budget.revenue,
            food.budget.cost + beverage.budget.cost,
            food.actual.revenue + beverage.actual.revenue,
            food.actual.cost + beverage.actual.cost,
        )
        return BudgetVsActuals(
            date_from=start,
            date_to=end,
            property_id=property_id,
            food=food,
            beverage=beverage,
            combined=combined,
            daily_breakdown=daily,
            performance_indicators=performance_indicators(food, beverage),
        )
