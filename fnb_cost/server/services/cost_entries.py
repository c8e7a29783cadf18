"""
Food and beverage cost entry service.

Both families share one implementation, parameterised by ``CostKind``. A cost
entry records one outlet's cost for one day split across categories; after
every write the owning property's daily summary is recalculated so that its
actual cost figures follow the entries.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from fnb_cost.core.database.entities import (
    BeverageCostDetail,
    DailyFinancialSummary,
    FoodCostDetail,
    User,
)
from fnb_cost.core.database.entities.cost_entries import CostDetailBase, CostEntryBase
from fnb_cost.core.database.repositories import CostEntryRepository, SqlRepoBundle
from fnb_cost.core.errors import NotFoundError, ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import CategoryType
from fnb_cost.core.models.io.cost_entries import (
    CategoryCost,
    CostDetailInput,
    CostDetailRead,
    CostEntryCreate,
    CostEntryRead,
    CostEntryUpdate,
    CostItem,
    DetailedCostReport,
    OutletCostReport,
)

from .access import AccessControl
from .audit import AuditService, snapshot
from .daily_summaries import actual_cost, cost_percentage, recalculate_summary

logger = get_logger(__name__)


@dataclass(frozen=True)
class CostKind:
    """Everything that differs between the food and the beverage family."""

    name: str
    resource: str
    permission_prefix: str
    category_type: CategoryType
    repo_attr: str
    detail_model: type
    summary_prefix: str

    def permission(self, verb: str) -> str:
        return f"{self.permission_prefix}.{verb}"

    def summary_value(self, summary: DailyFinancialSummary, field: str) -> float:
        """Read a family-specific summary field such as ``ent`` or ``actual_revenue``."""
        names = {
            "ent": f"ent_{self.summary_prefix}",
            "co": f"co_{self.summary_prefix}",
            "other": f"other_{self.summary_prefix}_adjustment",
            "revenue": f"actual_{self.summary_prefix}_revenue",
            "budget_pct": f"budget_{self.summary_prefix}_cost_pct",
        }
        return getattr(summary, names[field]) or 0.0


FOOD = CostKind(
    name="food",
    resource="food_cost_entry",
    permission_prefix="financial.food_costs",
    category_type=CategoryType.food,
    repo_attr="food_costs",
    detail_model=FoodCostDetail,
    summary_prefix="food",
)

BEVERAGE = CostKind(
    name="beverage",
    resource="beverage_cost_entry",
    permission_prefix="financial.beverage_costs",
    category_type=CategoryType.beverage,
    repo_attr="beverage_costs",
    detail_model=BeverageCostDetail,
    summary_prefix="beverage",
)


def validate_details(details: Sequence[CostDetailInput]) -> None:
    """At least one detail, and no negative costs."""
    if not details:
        raise ValidationFailedError("Date, outlet and at least one cost detail are required")
    negative = [i for i, d in enumerate(details) if d.cost < 0]
    if negative:
        raise ValidationFailedError("Cost values must not be negative", details={"detail_indexes": negative})


class CostEntryService:
    """Cost entry operations for one family and one calling user."""

    def __init__(self, kind: CostKind, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.kind = kind
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    @property
    def entries(self) -> CostEntryRepository:
        return getattr(self.repos, self.kind.repo_attr)

    async def _read(self, entry: CostEntryBase, details: Optional[List[CostDetailBase]] = None) -> CostEntryRead:
        if details is None:
            details = (await self.entries.get_details([entry.id]))[entry.id]
        read = CostEntryRead.model_validate(entry)
        read.details = [CostDetailRead.model_validate(d) for d in details]
        return read

    async def _reads(self, entries: Sequence[CostEntryBase]) -> List[CostEntryRead]:
        grouped = await self.entries.get_details(e.id for e in entries)
        return [await self._read(e, grouped[e.id]) for e in entries]

    async def _snapshot(self, entry: CostEntryBase) -> Dict:
        return (await self._read(entry)).model_dump(mode="json")

    async def _get(self, entry_id: int) -> CostEntryBase:
        entry = await self.entries.get_by_id(entry_id)
        if entry is None:
            raise NotFoundError(f"{self.kind.name.capitalize()} cost entry", entry_id)
        await self.access.require_property(entry.property_id)
        return entry

    async def _outlet_property(self, outlet_id: int, verb: str) -> int:
        outlet = await self.repos.outlets.get_by_id(outlet_id)
        if outlet is None:
            raise NotFoundError("Outlet", outlet_id)
        await self.access.require_property_permission(outlet.property_id, self.kind.permission(verb))
        return outlet.property_id

    async def _build_details(self, inputs: Sequence[CostDetailInput]) -> List[CostDetailBase]:
        validate_details(inputs)
        rows: List[CostDetailBase] = []
        for item in inputs:
            category = await self.repos.categories.get_by_id(item.category_id)
            if category is None:
                raise NotFoundError("Category", item.category_id)
            if category.type != self.kind.category_type.value:
                raise ValidationFailedError(
                    f"Category {category.name} is not a {self.kind.category_type.value} category"
                )
            rows.append(
                self.kind.detail_model(
                    category_id=category.id,
                    category_name=category.name,
                    cost=item.cost,
                    description=item.description,
                )
            )
        return rows

    async def save(self, data: CostEntryCreate) -> CostEntryRead:
        """Create an entry; ``total_cost`` is the sum of detail costs."""
        property_id = await self._outlet_property(data.outlet_id, "create")
        details = await self._build_details(data.details)
        entry = self.entries.model(
            date=data.date,
            outlet_id=data.outlet_id,
            property_id=property_id,
            total_cost=sum(d.cost for d in details),
            created_by=self.user.id,
            updated_by=self.user.id,
        )
        entry = await self.entries.create_with_details(entry, details)
        await recalculate_summary(self.repos, entry.date, property_id)

        read = await self._read(entry)
        logger.info(
            f"User {self.user.id} saved {self.kind.name} cost entry {entry.id} "
            f"for outlet {entry.outlet_id} on {entry.date}: {entry.total_cost:.2f}"
        )
        await self.audit.log_data_change(
            "CREATE", self.kind.resource, entry.id, after=read.model_dump(mode="json"), property_id=property_id
        )
        return read

    async def update(self, entry_id: int, data: CostEntryUpdate) -> CostEntryRead:
        """Update date, outlet or details; details are replaced wholesale."""
        entry = await self._get(entry_id)
        await self.access.require_property_permission(entry.property_id, self.kind.permission("update"))
        before = await self._snapshot(entry)
        old_date, old_property = entry.date, entry.property_id

        if data.outlet_id is not None and data.outlet_id != entry.outlet_id:
            entry.property_id = await self._outlet_property(data.outlet_id, "update")
            entry.outlet_id = data.outlet_id
        if data.date is not None:
            entry.date = data.date
        entry.updated_by = self.user.id

        if data.details is not None:
            details = await self._build_details(data.details)
        else:
            details = [
                self.kind.detail_model(
                    category_id=d.category_id, category_name=d.category_name, cost=d.cost, description=d.description
                )
                for d in (await self.entries.get_details([entry.id]))[entry.id]
            ]
        entry.total_cost = sum(d.cost for d in details)
        entry = await self.entries.replace_details(entry, details)

        await recalculate_summary(self.repos, entry.date, entry.property_id)
        if (old_date, old_property) != (entry.date, entry.property_id):
            await recalculate_summary(self.repos, old_date, old_property)

        read = await self._read(entry)
        await self.audit.log_data_change(
            "UPDATE",
            self.kind.resource,
            entry.id,
            before=before,
            after=read.model_dump(mode="json"),
            property_id=entry.property_id,
        )
        return read

    async def delete(self, entry_id: int) -> None:
        entry = await self._get(entry_id)
        await self.access.require_property_permission(entry.property_id, self.kind.permission("delete"))
        before = await self._snapshot(entry)
        entry_date, property_id = entry.date, entry.property_id
        await self.entries.delete(entry_id)
        await recalculate_summary(self.repos, entry_date, property_id)
        logger.info(f"User {self.user.id} deleted {self.kind.name} cost entry {entry_id}")
        await self.audit.log_data_change("DELETE", self.kind.resource, entry_id, before=before, property_id=property_id)

    async def get(self, entry_id: int) -> CostEntryRead:
        return await self._read(await self._get(entry_id))

    async def get_by_date_and_outlet(self, entry_date: date, outlet_id: int) -> CostEntryRead:
        await self._outlet_property(outlet_id, "read")
        entry = await self.entries.get_by_date_and_outlet(entry_date, outlet_id)
        if entry is None:
            raise NotFoundError(f"{self.kind.name.capitalize()} cost entry", f"{entry_date.isoformat()}/{outlet_id}")
        return await self._read(entry)

    async def list_range(self, start: date, end: date, *, outlet_id: Optional[int] = None) -> List[CostEntryRead]:
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        if outlet_id is not None:
            await self._outlet_property(outlet_id, "read")
        entries = await self.entries.list_in_range(
            start, end, outlet_id=outlet_id, property_ids=await self.access.accessible_property_ids()
        )
        return await self._reads(entries)

    async def list_by_outlet(self, outlet_id: int) -> List[CostEntryRead]:
        await self._outlet_property(outlet_id, "read")
        return await self._reads(await self.entries.list_by_outlet(outlet_id))

    async def detailed_report(self, start: date, end: date, *, outlet_id: Optional[int] = None) -> DetailedCostReport:
        """Per-outlet category breakdown plus an all-outlets summary.

        Revenue and adjustments are recorded per property, not per outlet, so
        outlet rows carry zero revenue and percentages while the overall row
        folds in the daily summaries of the range.
        """
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        if outlet_id is not None:
            await self._outlet_property(outlet_id, "read")
        visible = await self.access.accessible_property_ids()
        entries = sorted(
            await self.entries.list_in_range(start, end, outlet_id=outlet_id, property_ids=visible),
            key=lambda e: (e.date, e.id),
        )
        details = await self.entries.get_details(e.id for e in entries)
        outlets = {o.id: o.name for o in await self.repos.outlets.list_for_properties(visible)}

        grouped: "OrderedDict[int, List[CostEntryBase]]" = OrderedDict()
        for entry in entries:
            grouped.setdefault(entry.outlet_id, []).append(entry)

        reports: List[OutletCostReport] = []
        overall_categories: Dict[str, float] = {}
        overall_items: List[CostItem] = []
        transfers_total = 0.0
        for outlet, outlet_entries in grouped.items():
            categories, items, total = self._breakdown(outlet_entries, details)
            for name, cost in categories.items():
                overall_categories[name] = overall_categories.get(name, 0.0) + cost
            overall_items.extend(items)
            transfers_total += total
            reports.append(
                OutletCostReport(
                    outlet_id=str(outlet),
                    outlet_name=outlets.get(outlet, "Unknown Outlet"),
                    date_from=start,
                    date_to=end,
                    category_costs=[CategoryCost(category_name=n, total_cost=c) for n, c in categories.items()],
                    total_cost_from_transfers=total,
                    total_cost=total,
                    cost_details_by_item=items,
                )
            )

        summary_ids = visible
        if outlet_id is not None:
            summary_ids = [(await self.repos.outlets.get_by_id(outlet_id)).property_id]
        summaries = await self.repos.daily_summaries.list_in_range(start, end, summary_ids)
        overall = self._overall(start, end, summaries, transfers_total, overall_categories, overall_items)
        return DetailedCostReport(outlet_reports=reports, overall_summary_report=overall)

    @staticmethod
    def _breakdown(
        entries: Sequence[CostEntryBase], details: Dict[int, List[CostDetailBase]]
    ) -> Tuple[Dict[str, float], List[CostItem], float]:
        categories: Dict[str, float] = {}
        items: List[CostItem] = []
        total = 0.0
        for entry in entries:
            total += entry.total_cost or 0.0
            for detail in details.get(entry.id, []):
                name = detail.category_name or "Unknown"
                categories[name] = categories.get(name, 0.0) + detail.cost
                items.append(CostItem(category_name=name, description=detail.description or "", cost=detail.cost))
        return categories, items, total

    def _overall(
        self,
        start: date,
        end: date,
        summaries: Sequence[DailyFinancialSummary],
        transfers_total: float,
        categories: Dict[str, float],
        items: List[CostItem],
    ) -> OutletCostReport:
        kind = self.kind
        revenue = sum(kind.summary_value(s, "revenue") for s in summaries)
        ent = sum(kind.summary_value(s, "ent") for s in summaries)
        co = sum(kind.summary_value(s, "co") for s in summaries)
        other = sum(kind.summary_value(s, "other") for s in summaries)
        actual = actual_cost(transfers_total, ent, co, other)

        budget_pcts = [kind.summary_value(s, "budget_pct") for s in summaries]
        budget_pcts = [p for p in budget_pcts if p > 0]
        budget_pct = sum(budget_pcts) / len(budget_pcts) if budget_pcts else 0.0
        pct = cost_percentage(actual, revenue)

        return OutletCostReport(
            outlet_id="all",
            outlet_name="All Outlets",
            date_from=start,
            date_to=end,
            category_costs=[CategoryCost(category_name=n, total_cost=c) for n, c in categories.items()],
            total_cost_from_transfers=transfers_total,
            other_adjustments=other,
            oc_total=co,
            ent_total=ent,
            total_cost=actual,
            total_revenue=revenue,
            cost_percentage=pct,
            budget_cost_percentage=budget_pct,
            variance_percentage=pct - budget_pct,
            cost_details_by_item=items,
        )
