"""
Daily financial summary service.

A summary holds one property's revenue, budget and cost adjustments for one
day. Its ``actual_*`` figures are derived from that day's food and beverage
cost entries by ``recalculate_summary``, which the cost entry service calls
after every write.

Derived figures, per family (food or beverage):

    actual   = total cost entries - ent - co + other
    pct      = actual / revenue * 100   (0 when revenue <= 0)
    variance = pct - budget pct
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fnb_cost.core.database.entities import DailyFinancialSummary, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.daily_summaries import (
    DailySummaryCreate,
    DailySummaryPage,
    DailySummaryRead,
    DailySummaryUpdate,
)

from .access import AccessControl
from .audit import AuditService, snapshot

logger = get_logger(__name__)

RESOURCE = "daily_financial_summary"
INPUT_EXCLUDE = {"date", "property_id"}
# Explicit null clears these; numeric columns are NOT NULL so null means "leave as is"
NULLABLE_INPUTS = {"note"}


def actual_cost(total: float, ent: float, co: float, other: float) -> float:
    return total - (ent or 0.0) - (co or 0.0) + (other or 0.0)


def cost_percentage(cost: float, revenue: float) -> float:
    return cost / revenue * 100 if revenue and revenue > 0 else 0.0


async def recalculate_summary(
    repos: SqlRepoBundle, summary_date: date, property_id: int
) -> Optional[DailyFinancialSummary]:
    """Rewrite the derived cost figures of one summary from its cost entries.

    Returns:
        The updated summary, or None when no summary exists for the day
    """
    summary = await repos.daily_summaries.get_by_date(summary_date, property_id)
    if summary is None:
        return None

    food_total = await repos.food_costs.total_for_day(summary_date, property_id)
    beverage_total = await repos.beverage_costs.total_for_day(summary_date, property_id)

    summary.actual_food_cost = actual_cost(
        food_total, summary.ent_food, summary.co_food, summary.other_food_adjustment
    )
    summary.actual_food_cost_pct = cost_percentage(summary.actual_food_cost, summary.actual_food_revenue)
    summary.food_variance_pct = summary.actual_food_cost_pct - (summary.budget_food_cost_pct or 0.0)

    summary.actual_beverage_cost = actual_cost(
        beverage_total, summary.ent_beverage, summary.co_beverage, summary.other_beverage_adjustment
    )
    summary.actual_beverage_cost_pct = cost_percentage(summary.actual_beverage_cost, summary.actual_beverage_revenue)
    summary.beverage_variance_pct = summary.actual_beverage_cost_pct - (summary.budget_beverage_cost_pct or 0.0)

    logger.debug(
        f"Recalculated summary {summary.id} for property {property_id} on {summary_date}: "
        f"food={summary.actual_food_cost:.2f} beverage={summary.actual_beverage_cost:.2f}"
    )
    return await repos.daily_summaries.update(summary)


class DailySummaryService:
    """Daily summary reads and writes for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def resolve_property(self, property_id: Optional[int]) -> int:
        """Pick the property a summary belongs to.

        Super admins must name the property. Other users default to their
        first accessible property and may only name one they can access.
        """
        if self.access.is_super_admin:
            if property_id is None:
                raise ValidationFailedError("property_id is required for super admins")
            if await self.repos.properties.get_by_id(property_id) is None:
                raise NotFoundError("Property", property_id)
            return property_id

        accessible = await self.access.accessible_property_ids() or []
        if property_id is None:
            if not accessible:
                raise PermissionDeniedError("No property access found for user")
            return accessible[0]
        if property_id not in accessible:
            raise PermissionDeniedError(f"No access to property {property_id}")
        return property_id

    async def _get(self, summary_id: int) -> DailyFinancialSummary:
        summary = await self.repos.daily_summaries.get_by_id(summary_id)
        if summary is None:
            raise NotFoundError("Daily summary", summary_id)
        await self.access.require_property(summary.property_id)
        return summary

    @staticmethod
    def _inputs(data: Any) -> Dict[str, Any]:
        values = data.model_dump(exclude=INPUT_EXCLUDE, exclude_unset=True)
        return {k: v for k, v in values.items() if v is not None or k in NULLABLE_INPUTS}

    async def save(self, data: DailySummaryCreate) -> DailySummaryRead:
        """Create the summary for (date, property) or update the existing one."""
        property_id = await self.resolve_property(data.property_id)
        await self.access.require_property_permission(property_id, "financial.daily_summary.create")

        existing = await self.repos.daily_summaries.get_by_date(data.date, property_id)
        if existing is None:
            summary = await self.repos.daily_summaries.create(
                DailyFinancialSummary(
                    date=data.date,
                    property_id=property_id,
                    created_by=self.user.id,
                    updated_by=self.user.id,
                    **self._inputs(data),
                )
            )
            action, before = "CREATE", None
        else:
            before = snapshot(existing)
            for key, value in self._inputs(data).items():
                setattr(existing, key, value)
            existing.updated_by = self.user.id
            summary = await self.repos.daily_summaries.update(existing)
            action = "UPDATE"

        summary = await recalculate_summary(self.repos, summary.date, property_id) or summary
        logger.info(f"User {self.user.id} saved daily summary {summary.id} ({action}) for {summary.date}")
        await self.audit.log_data_change(
            action, RESOURCE, summary.id, before=before, after=summary, property_id=property_id
        )
        return DailySummaryRead.model_validate(summary)

    async def get(self, summary_id: int) -> DailySummaryRead:
        return DailySummaryRead.model_validate(await self._get(summary_id))

    async def get_by_date(self, summary_date: date, property_id: Optional[int] = None) -> DailySummaryRead:
        property_id = await self.resolve_property(property_id)
        summary = await self.repos.daily_summaries.get_by_date(summary_date, property_id)
        if summary is None:
            raise NotFoundError("Daily summary", f"{summary_date.isoformat()}/{property_id}")
        return DailySummaryRead.model_validate(summary)

    async def _visible(self, property_id: Optional[int]) -> Optional[List[int]]:
        """Property filter for listings: one property, or everything accessible."""
        if property_id is not None:
            await self.access.require_property(property_id)
            return [property_id]
        return await self.access.accessible_property_ids()

    async def list_range(
        self, start: date, end: date, *, property_id: Optional[int] = None
    ) -> List[DailySummaryRead]:
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        summaries = await self.repos.daily_summaries.list_in_range(start, end, await self._visible(property_id))
        return [DailySummaryRead.model_validate(s) for s in summaries]

    async def paginate(
        self,
        *,
        limit: int = 20,
        cursor: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        property_id: Optional[int] = None,
    ) -> DailySummaryPage:
        """Cursor-paginated summaries, newest first."""
        rows, has_more, total = await self.repos.daily_summaries.paginate(
            limit=limit,
            cursor=cursor,
            property_ids=await self._visible(property_id),
            start=start,
            end=end,
        )
        return DailySummaryPage(
            items=[DailySummaryRead.model_validate(r) for r in rows],
            has_more=has_more,
            next_cursor=rows[-1].id if has_more and rows else None,
            total_count=total,
        )

    async def update(self, summary_id: int, data: DailySummaryUpdate) -> DailySummaryRead:
        summary = await self._get(summary_id)
        await self.access.require_property_permission(summary.property_id, "financial.daily_summary.update")
        old_date = summary.date
        if data.date is not None and data.date != old_date:
            clash = await self.repos.daily_summaries.get_by_date(data.date, summary.property_id)
            if clash is not None:
                raise ConflictError(f"A summary for {data.date.isoformat()} already exists")

        before = snapshot(summary)
        if data.date is not None:
            summary.date = data.date
        for key, value in self._inputs(data).items():
            setattr(summary, key, value)
        summary.updated_by = self.user.id
        summary = await self.repos.daily_summaries.update(summary)

        summary = await recalculate_summary(self.repos, summary.date, summary.property_id) or summary
        if old_date != summary.date:
            await recalculate_summary(self.repos, old_date, summary.property_id)
        await self.audit.log_data_change(
            "UPDATE", RESOURCE, summary.id, before=before, after=summary, property_id=summary.property_id
        )
        return DailySummaryRead.model_validate(summary)

    async def delete(self, summary_id: int) -> None:
        summary = await self._get(summary_id)
        await self.access.require_property_permission(summary.property_id, "financial.daily_summary.delete")
        before = snapshot(summary)
        await self.repos.daily_summaries.delete(summary_id)
        logger.info(f"User {self.user.id} deleted daily summary {summary_id}")
        await self.audit.log_data_change("DELETE", RESOURCE, summary_id, before=before, property_id=summary.property_id)
