"""
Performance report service: category cost trends, outlet efficiency and
property comparison.

Each report is compared against the period of the same length that ends the
day before the requested range. Revenue is recorded per property, so an
outlet's revenue is its property's revenue of the same family split by the
outlet's share of that family's cost.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Set, Tuple

from fnb_cost.core.analytics.forecasting import growth_pct, margin_pct, mean
from fnb_cost.core.analytics.performance import (
    cost_performance,
    day_of_week_pattern,
    efficiency_rating,
    efficiency_trend,
    extreme_days,
    half_split_change_pct,
    monthly_totals,
    previous_period,
    revenue_cost_ratio,
    share,
    trend_label,
    volatility,
    weekly_totals,
)
from fnb_cost.core.database.entities import DailyFinancialSummary, Outlet, Property, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.performance import (
    CategoryOutletBreakdown,
    CategoryRankings,
    CategoryTrend,
    CategoryTrendsReport,
    CategoryTrendsSummary,
    DayOfWeekPatternRead,
    DayValue,
    FamilyTotals,
    OutletEfficiency,
    OutletEfficiencyReport,
    OutletEfficiencySummary,
    OutletRankings,
    PeriodValue,
    PropertyOutletAnalysis,
    PropertyPerformance,
    PropertyPerformanceReport,
    PropertyPerformanceSummary,
    PropertyRankings,
)

from .access import AccessControl
from .audit import AuditService
from .daily_summaries import cost_percentage
from .forecasting import DETAILED_REPORTS
from .reports import FINANCIAL_REPORTS, average_positive

logger = get_logger(__name__)

FAMILIES = ("food", "beverage")
RATINGS = ("Excellent", "Good", "Fair", "Poor")


def _series(totals: Dict[date, float]) -> List[float]:
    return [totals[day] for day in sorted(totals)]


def _revenue(summary: DailyFinancialSummary, family: str) -> float:
    return getattr(summary, f"actual_{family}_revenue") or 0.0


def _cost(summary: DailyFinancialSummary, family: str) -> float:
    return getattr(summary, f"actual_{family}_cost") or 0.0


def _budget_pct(summaries: List[DailyFinancialSummary], family: str) -> float:
    return average_positive([getattr(s, f"budget_{family}_cost_pct") for s in summaries])


def _variance(actual_pct: float, budget_pct: float) -> float:
    return actual_pct - budget_pct if budget_pct > 0 else 0.0


@dataclass
class _CategoryData:
    family: str
    name: str
    daily: Dict[date, float] = field(default_factory=lambda: defaultdict(float))
    per_outlet: Dict[int, Dict[date, float]] = field(default_factory=lambda: defaultdict(lambda: defaultdict(float)))


@dataclass
class _PeriodCosts:
    """Entry totals of one period by family, per outlet and per property."""

    outlet: Dict[str, Dict[int, float]] = field(default_factory=lambda: {f: defaultdict(float) for f in FAMILIES})
    property: Dict[str, Dict[int, float]] = field(default_factory=lambda: {f: defaultdict(float) for f in FAMILIES})
    outlet_days: Dict[int, Set[date]] = field(default_factory=lambda: defaultdict(set))
    summaries: Dict[int, List[DailyFinancialSummary]] = field(default_factory=lambda: defaultdict(list))

    def outlet_revenue(self, outlet: Outlet, family: str) -> float:
        property_cost = self.property[family][outlet.property_id]
        if property_cost <= 0:
            return 0.0
        property_revenue = sum(_revenue(s, family) for s in self.summaries[outlet.property_id])
        return property_revenue * self.outlet[family][outlet.id] / property_cost


class PerformanceReportService:
    """Period-over-period performance reports for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _scope(self, start: date, end: date, property_id: Optional[int], permission: str) -> Optional[List[int]]:
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        if property_id is not None:
            await self.access.require_property_permission(property_id, permission)
            return [property_id]
        self.access.require(permission)
        return await self.access.accessible_property_ids()

    def _repos_by_family(self):
        return (("food", self.repos.food_costs), ("beverage", self.repos.beverage_costs))

    async def _categories(
        self, start: date, end: date, property_ids: Optional[List[int]], outlet_id: Optional[int]
    ) -> Dict[int, _CategoryData]:
        categories: Dict[int, _CategoryData] = {}
        for family, repo in self._repos_by_family():
            for day, row_outlet, category_id, category_name, cost in await repo.category_totals(
                start, end, outlet_id=outlet_id, property_ids=property_ids
            ):
                data = categories.setdefault(category_id, _CategoryData(family=family, name=category_name or "Unknown"))
                data.daily[day] += float(cost or 0.0)
                data.per_outlet[row_outlet][day] += float(cost or 0.0)
        return categories

    async def _period_costs(self, start: date, end: date, property_ids: Optional[List[int]]) -> _PeriodCosts:
        costs = _PeriodCosts()
        for family, repo in self._repos_by_family():
            for entry in await repo.list_in_range(start, end, property_ids=property_ids):
                value = entry.total_cost or 0.0
                costs.outlet[family][entry.outlet_id] += value
                costs.property[family][entry.property_id] += value
                costs.outlet_days[entry.outlet_id].add(entry.date)
        for summary in await self.repos.daily_summaries.list_in_range(start, end, property_ids):
            costs.summaries[summary.property_id].append(summary)
        return costs

    async def category_trends(
        self, start: date, end: date, *, property_id: Optional[int] = None, outlet_id: Optional[int] = None
    ) -> CategoryTrendsReport:
        """Daily cost trend of every category with cost in the range.

        Args:
            start: First day
            end: Last day
            property_id: Restrict to one property
            outlet_id: Restrict to one outlet

        Returns:
            Per-category trends, family totals, rankings and insights
        """
        property_ids = await self._scope(start, end, property_id, DETAILED_REPORTS)
        previous_from, previous_to = previous_period(start, end)
        current = await self._categories(start, end, property_ids, outlet_id)
        previous = await self._categories(previous_from, previous_to, property_ids, outlet_id)
        outlet_names = {o.id: o.name for o in await self.repos.outlets.list_for_properties(property_ids)}

        trends = [
            self._category_trend(category_id, data, previous.get(category_id), outlet_names)
            for category_id, data in current.items()
        ]
        trends.sort(key=lambda t: (-t.total_cost, t.category_name))

        total_cost = sum(t.total_cost for t in trends)
        previous_cost = sum(sum(d.daily.values()) for d in previous.values())
        total_growth = growth_pct(total_cost, previous_cost)
        families = {
            family: self._family_totals([t for t in trends if t.category_type == family], total_cost)
            for family in FAMILIES
        }

        by_growth = sorted(trends, key=lambda t: -t.growth_percentage)
        by_volatility = sorted(trends, key=lambda t: -t.volatility)
        summary = CategoryTrendsSummary(
            total_categories=len(trends),
            total_cost=total_cost,
            previous_period_cost=previous_cost,
            total_growth=total_growth,
            performance=cost_performance(total_growth),
            food=families["food"],
            beverage=families["beverage"],
            top_category=trends[0].category_name if trends else None,
            fastest_growing=by_growth[0].category_name if trends else None,
            most_volatile=by_volatility[0].category_name if trends else None,
        )
        logger.info(f"Category trends for user {self.user.id}: {len(trends)} categories, {total_cost:.2f} total cost")
        return CategoryTrendsReport(
            report_title="Category Performance Trends",
            date_from=start,
            date_to=end,
            previous_from=previous_from,
            previous_to=previous_to,
            property_id=property_id,
            summary=summary,
            categories=trends,
            rankings=CategoryRankings(
                by_cost=[t.category_id for t in trends],
                by_growth=[t.category_id for t in by_growth],
                by_volatility=[t.category_id for t in by_volatility],
            ),
            insights=self._category_insights(trends, families),
            key_findings=self._category_findings(trends, summary),
        )

    @staticmethod
    def _category_trend(
        category_id: int, data: _CategoryData, previous: Optional[_CategoryData], outlet_names: Dict[int, str]
    ) -> CategoryTrend:
        values = _series(data.daily)
        total = sum(values)
        change = half_split_change_pct(values)
        (high_day, high), (low_day, low) = extreme_days(data.daily)
        pattern = day_of_week_pattern(data.daily)
        previous_cost = sum(previous.daily.values()) if previous else 0.0

        breakdown = []
        for outlet_id, days in data.per_outlet.items():
            outlet_total = sum(days.values())
            breakdown.append(
                CategoryOutletBreakdown(
                    outlet_id=outlet_id,
                    outlet_name=outlet_names.get(outlet_id, "Unknown"),
                    total_cost=outlet_total,
                    percentage=share(outlet_total, total),
                    trend=trend_label(half_split_change_pct(_series(days))),
                )
            )
        breakdown.sort(key=lambda b: -b.total_cost)

        return CategoryTrend(
            category_id=category_id,
            category_name=data.name,
            category_type=data.family,
            total_cost=total,
            average_daily_cost=mean(values),
            days_with_cost=len(values),
            trend=trend_label(change),
            trend_percentage=change,
            volatility=volatility(values),
            highest_day=DayValue(date=high_day, value=high),
            lowest_day=DayValue(date=low_day, value=low),
            weekly_totals=[PeriodValue(period=monday.isoformat(), value=v) for monday, v in weekly_totals(data.daily)],
            monthly_totals=[PeriodValue(period=month, value=v) for month, v in monthly_totals(data.daily)],
            outlet_breakdown=breakdown,
            day_of_week=DayOfWeekPatternRead(
                averages=pattern.averages,
                has_pattern=pattern.has_pattern,
                peak_days=pattern.peak_days,
                low_days=pattern.low_days,
            ),
            previous_period_cost=previous_cost,
            growth_percentage=growth_pct(total, previous_cost),
        )

    @staticmethod
    def _family_totals(trends: List[CategoryTrend], grand_total: float) -> FamilyTotals:
        total = sum(t.total_cost for t in trends)
        return FamilyTotals(
            total_cost=total,
            percentage=share(total, grand_total),
            category_count=len(trends),
            average_growth=mean([t.growth_percentage for t in trends]),
        )

    @staticmethod
    def _category_insights(trends: List[CategoryTrend], families: Dict[str, FamilyTotals]) -> List[str]:
        insights = []
        increasing = [t.category_name for t in trends if t.trend == "Increasing"]
        if increasing:
            insights.append(f"Monitor increasing costs in: {', '.join(increasing[:3])}")
        volatile = [t.category_name for t in trends if t.volatility > 100]
        if volatile:
            insights.append(f"High day-to-day cost volatility in: {', '.join(volatile[:3])}")
        for family in FAMILIES:
            if families[family].average_growth > 10:
                insights.append(f"{family.capitalize()} costs grew {families[family].average_growth:.1f}% on average")
        return insights

    @staticmethod
    def _category_findings(trends: List[CategoryTrend], summary: CategoryTrendsSummary) -> List[str]:
        if not trends:
            return []
        top = trends[0]
        findings = [
            f"{top.category_name} is the largest cost at {share(top.total_cost, summary.total_cost):.1f}% of the total",
            f"Total cost changed {summary.total_growth:+.1f}% against the previous period",
        ]
        patterned = [t for t in trends if t.day_of_week.has_pattern and t.day_of_week.peak_days]
        if patterned:
            findings.append(f"{patterned[0].category_name} peaks on {', '.join(patterned[0].day_of_week.peak_days)}")
        return findings

    async def outlet_efficiency(
        self, start: date, end: date, *, property_id: Optional[int] = None
    ) -> OutletEfficiencyReport:
        """Revenue, cost and margin of every active outlet.

        Raises:
            ValidationFailedError: No active outlet in the selected properties
        """
        property_ids = await self._scope(start, end, property_id, DETAILED_REPORTS)
        outlets = await self.repos.outlets.list_for_properties(property_ids, active_only=True)
        if not outlets:
            raise ValidationFailedError("No active outlets in the selected properties")
        properties = {
            p.id: p for p in await self.repos.properties.search(property_ids=sorted({o.property_id for o in outlets}))
        }

        current = await self._period_costs(start, end, property_ids)
        previous = await self._period_costs(*previous_period(start, end), property_ids)
        rows = [self._outlet_row(o, properties[o.property_id], current, previous) for o in outlets]
        rows.sort(key=lambda r: (-r.profit_margin, r.outlet_name))

        total_revenue = sum(r.total_revenue for r in rows)
        total_cost = sum(r.total_cost for r in rows)
        average_margin = mean([r.profit_margin for r in rows])
        average_ratio = mean([r.revenue_cost_ratio for r in rows])
        summary = OutletEfficiencySummary(
            total_outlets=len(rows),
            total_revenue=total_revenue,
            total_cost=total_cost,
            gross_profit=total_revenue - total_cost,
            average_margin=average_margin,
            average_ratio=average_ratio,
            best_outlet=rows[0].outlet_name,
            worst_outlet=rows[-1].outlet_name,
            ratings={rating: sum(1 for r in rows if r.efficiency_rating == rating) for rating in RATINGS},
        )

        recommendations = []
        if average_margin < 10:
            recommendations.append("Average outlet margin is below 10%; review menu pricing and portion control")
        best_ratio = max(rows, key=lambda r: r.revenue_cost_ratio)
        if best_ratio.revenue_cost_ratio > 5:
            recommendations.append(f"Replicate the practices of {best_ratio.outlet_name} across other outlets")
        worst_cost = max(rows, key=lambda r: cost_percentage(r.total_cost, r.total_revenue))
        if cost_percentage(worst_cost.total_cost, worst_cost.total_revenue) > 40:
            recommendations.append(f"Cost percentage at {worst_cost.outlet_name} exceeds 40%; audit purchasing")

        logger.info(f"Outlet efficiency for user {self.user.id}: {len(rows)} outlets")
        return OutletEfficiencyReport(
            report_title="Outlet Efficiency and Profitability",
            date_from=start,
            date_to=end,
            property_id=property_id,
            summary=summary,
            outlets=rows,
            rankings=OutletRankings(
                by_margin=[r.outlet_id for r in rows],
                by_ratio=[r.outlet_id for r in sorted(rows, key=lambda r: -r.revenue_cost_ratio)],
                by_revenue=[r.outlet_id for r in sorted(rows, key=lambda r: -r.total_revenue)],
            ),
            property_analysis=self._property_analysis(rows) if len(properties) > 1 else [],
            recommendations=recommendations,
        )

    @staticmethod
    def _outlet_row(outlet: Outlet, prop: Property, current: _PeriodCosts, previous: _PeriodCosts) -> OutletEfficiency:
        revenue = {f: current.outlet_revenue(outlet, f) for f in FAMILIES}
        cost = {f: current.outlet[f][outlet.id] for f in FAMILIES}
        total_revenue = sum(revenue.values())
        total_cost = sum(cost.values())
        previous_revenue = sum(previous.outlet_revenue(outlet, f) for f in FAMILIES)
        previous_cost = sum(previous.outlet[f][outlet.id] for f in FAMILIES)

        profit = total_revenue - total_cost
        margin = margin_pct(total_revenue, total_cost)
        ratio = revenue_cost_ratio(total_revenue, total_cost)
        days = len(current.outlet_days[outlet.id])
        pct = {f: cost_percentage(cost[f], revenue[f]) for f in FAMILIES}
        budget = {f: _budget_pct(current.summaries[outlet.property_id], f) for f in FAMILIES}
        return OutletEfficiency(
            outlet_id=outlet.id,
            outlet_name=outlet.name,
            outlet_code=outlet.outlet_code,
            property_id=prop.id,
            property_name=prop.name,
            food_revenue=revenue["food"],
            beverage_revenue=revenue["beverage"],
            total_revenue=total_revenue,
            food_cost=cost["food"],
            beverage_cost=cost["beverage"],
            total_cost=total_cost,
            gross_profit=profit,
            profit_margin=margin,
            revenue_cost_ratio=ratio,
            food_cost_percentage=pct["food"],
            beverage_cost_percentage=pct["beverage"],
            budget_food_cost_percentage=budget["food"],
            budget_beverage_cost_percentage=budget["beverage"],
            food_cost_variance=_variance(pct["food"], budget["food"]),
            beverage_cost_variance=_variance(pct["beverage"], budget["beverage"]),
            days_with_cost=days,
            average_daily_profit=profit / days if days else 0.0,
            previous_revenue=previous_revenue,
            previous_cost=previous_cost,
            revenue_growth=growth_pct(total_revenue, previous_revenue),
            cost_growth=growth_pct(total_cost, previous_cost),
            efficiency_trend=efficiency_trend(ratio, revenue_cost_ratio(previous_revenue, previous_cost)),
            efficiency_rating=efficiency_rating(margin, ratio),
        )

    @staticmethod
    def _property_analysis(rows: List[OutletEfficiency]) -> List[PropertyOutletAnalysis]:
        grouped: Dict[Tuple[int, str], List[OutletEfficiency]] = defaultdict(list)
        for row in rows:
            grouped[(row.property_id, row.property_name)].append(row)
        analysis = []
        for (pid, name), members in sorted(grouped.items(), key=lambda item: item[0][1]):
            revenue = sum(m.total_revenue for m in members)
            cost = sum(m.total_cost for m in members)
            analysis.append(
                PropertyOutletAnalysis(
                    property_id=pid,
                    property_name=name,
                    outlet_count=len(members),
                    total_revenue=revenue,
                    total_cost=cost,
                    profit_margin=margin_pct(revenue, cost),
                    best_outlet=max(members, key=lambda m: m.profit_margin).outlet_name,
                )
            )
        return analysis

    async def property_performance(self, start: date, end: date) -> PropertyPerformanceReport:
        """Compare every active property the caller can reach.

        Properties without summaries in the range are listed with zero figures.
        """
        property_ids = await self._scope(start, end, None, FINANCIAL_REPORTS)
        properties = await self.repos.properties.search(property_ids=property_ids, is_active=True)
        ids = [p.id for p in properties]

        current: Dict[int, List[DailyFinancialSummary]] = defaultdict(list)
        for summary in await self.repos.daily_summaries.list_in_range(start, end, ids):
            current[summary.property_id].append(summary)
        previous: Dict[int, List[DailyFinancialSummary]] = defaultdict(list)
        for summary in await self.repos.daily_summaries.list_in_range(*previous_period(start, end), ids):
            previous[summary.property_id].append(summary)
        outlet_counts: Dict[int, int] = defaultdict(int)
        for outlet in await self.repos.outlets.list_for_properties(ids, active_only=True):
            outlet_counts[outlet.property_id] += 1

        rows = [self._property_row(p, current[p.id], previous[p.id], outlet_counts[p.id]) for p in properties]
        reported = sorted([r for r in rows if r.days_reported], key=lambda r: -r.profit_margin)
        total_revenue = sum(r.total_revenue for r in rows)
        total_cost = sum(r.total_cost for r in rows)

        logger.info(f"Property performance for user {self.user.id}: {len(rows)} properties, {len(reported)} reporting")
        return PropertyPerformanceReport(
            report_title="Property Performance Comparison",
            date_from=start,
            date_to=end,
            summary=PropertyPerformanceSummary(
                total_properties=len(rows),
                total_revenue=total_revenue,
                total_cost=total_cost,
                gross_profit=total_revenue - total_cost,
                average_margin=mean([r.profit_margin for r in reported]),
                best_property=reported[0].property_name if reported else None,
                worst_property=reported[-1].property_name if reported else None,
            ),
            properties=rows,
            rankings=PropertyRankings(
                by_revenue=[r.property_id for r in sorted(rows, key=lambda r: -r.total_revenue)],
                by_margin=[r.property_id for r in sorted(rows, key=lambda r: -r.profit_margin)],
                by_efficiency=[r.property_id for r in sorted(rows, key=lambda r: -r.revenue_cost_ratio)],
                by_cost_control=[
                    r.property_id for r in sorted(rows, key=lambda r: (not r.days_reported, r.overall_cost_percentage))
                ],
            ),
        )

    @staticmethod
    def _property_row(
        prop: Property,
        summaries: List[DailyFinancialSummary],
        previous: List[DailyFinancialSummary],
        active_outlets: int,
    ) -> PropertyPerformance:
        revenue = {f: sum(_revenue(s, f) for s in summaries) for f in FAMILIES}
        cost = {f: sum(_cost(s, f) for s in summaries) for f in FAMILIES}
        total_revenue = sum(revenue.values())
        total_cost = sum(cost.values())
        previous_revenue = sum(_revenue(s, f) for s in previous for f in FAMILIES)
        previous_cost = sum(_cost(s, f) for s in previous for f in FAMILIES)

        days = len(summaries)
        pct = {f: cost_percentage(cost[f], revenue[f]) for f in FAMILIES}
        budget = {f: _budget_pct(summaries, f) for f in FAMILIES}
        margin = margin_pct(total_revenue, total_cost)
        ratio = revenue_cost_ratio(total_revenue, total_cost)
        return PropertyPerformance(
            property_id=prop.id,
            property_name=prop.name,
            property_code=prop.property_code,
            property_type=prop.property_type,
            days_reported=days,
            total_food_revenue=revenue["food"],
            total_beverage_revenue=revenue["beverage"],
            total_revenue=total_revenue,
            total_food_cost=cost["food"],
            total_beverage_cost=cost["beverage"],
            total_cost=total_cost,
            gross_profit=total_revenue - total_cost,
            profit_margin=margin,
            food_cost_percentage=pct["food"],
            beverage_cost_percentage=pct["beverage"],
            overall_cost_percentage=cost_percentage(total_cost, total_revenue),
            average_daily_revenue=total_revenue / days if days else 0.0,
            average_daily_cost=total_cost / days if days else 0.0,
            budget_food_cost_percentage=budget["food"],
            budget_beverage_cost_percentage=budget["beverage"],
            food_cost_variance=_variance(pct["food"], budget["food"]),
            beverage_cost_variance=_variance(pct["beverage"], budget["beverage"]),
            active_outlets=active_outlets,
            revenue_per_outlet=total_revenue / active_outlets if active_outlets else 0.0,
            revenue_cost_ratio=ratio,
            previous_revenue=previous_revenue,
            previous_cost=previous_cost,
            revenue_growth=growth_pct(total_revenue, previous_revenue),
            cost_growth=growth_pct(total_cost, previous_cost),
            performance_rating=efficiency_rating(margin, ratio),
        )
