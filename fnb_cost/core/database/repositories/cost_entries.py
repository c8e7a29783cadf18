"""
Cost entry repository implementation.

One repository class serves both the food and the beverage tables; it is
parameterised with the entry and detail entity classes. Details are loaded and
written explicitly instead of through ORM relationships so every access stays
an awaited query.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import utc_now
from ..entities.cost_entries import (
    BeverageCostDetail,
    BeverageCostEntry,
    CostDetailBase,
    CostEntryBase,
    FoodCostDetail,
    FoodCostEntry,
)
from .base import SqlRepository

EntryType = TypeVar("EntryType", bound=CostEntryBase)
DetailType = TypeVar("DetailType", bound=CostDetailBase)


class CostEntryRepository(SqlRepository[EntryType], Generic[EntryType, DetailType]):
    """Repository for cost entries and their category details."""

    def __init__(self, session: AsyncSession, model: Type[EntryType], detail_model: Type[DetailType]) -> None:
        super().__init__(session, model)
        self.detail_model = detail_model

    async def create_with_details(self, entry: EntryType, details: Sequence[DetailType]) -> EntryType:
        """Persist an entry and its details in one transaction.

        Args:
            entry: The entry to insert
            details: Detail rows; their ``entry_id`` is assigned here

        Returns:
            The persisted entry
        """
        self.session.add(entry)
        await self.session.flush()
        for detail in details:
            detail.entry_id = entry.id
            self.session.add(detail)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def replace_details(self, entry: EntryType, details: Sequence[DetailType]) -> EntryType:
        """Update an entry and swap all of its details for ``details``."""
        entry.updated_at = utc_now()
        self.session.add(entry)
        await self.session.execute(delete(self.detail_model).where(self.detail_model.entry_id == entry.id))
        for detail in details:
            detail.entry_id = entry.id
            self.session.add(detail)
        await self.session.commit()
        await self.session.refresh(entry)
        return entry

    async def delete(self, entity_id: int) -> bool:
        entry = await self.get_by_id(entity_id)
        if entry is None:
            return False
        await self.session.execute(delete(self.detail_model).where(self.detail_model.entry_id == entity_id))
        await self.session.delete(entry)
        await self.session.commit()
        return True

    async def get_details(self, entry_ids: Iterable[int]) -> Dict[int, List[DetailType]]:
        """Load details for several entries, keyed by entry id."""
        ids = list(entry_ids)
        grouped: Dict[int, List[DetailType]] = {entry_id: [] for entry_id in ids}
        if not ids:
            return grouped
        stmt = (
            select(self.detail_model)
            .where(self.detail_model.entry_id.in_(ids))
            .order_by(self.detail_model.entry_id, self.detail_model.id)
        )
        result = await self.session.execute(stmt)
        for detail in result.scalars().all():
            grouped[detail.entry_id].append(detail)
        return grouped

    async def get_by_date_and_outlet(self, entry_date: date, outlet_id: int) -> Optional[EntryType]:
        stmt = select(self.model).where(self.model.date == entry_date, self.model.outlet_id == outlet_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_in_range(
        self,
        start: date,
        end: date,
        *,
        outlet_id: Optional[int] = None,
        property_ids: Optional[Iterable[int]] = None,
    ) -> List[EntryType]:
        """List entries whose date lies within ``[start, end]``.

        Args:
            start: First day (inclusive)
            end: Last day (inclusive)
            outlet_id: Restrict to one outlet
            property_ids: Restrict to these properties (None means all)

        Returns:
            Entries ordered by date, newest first
        """
        stmt = select(self.model).where(self.model.date >= start, self.model.date <= end)
        if outlet_id is not None:
            stmt = stmt.where(self.model.outlet_id == outlet_id)
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return []
            stmt = stmt.where(self.model.property_id.in_(ids))
        stmt = stmt.order_by(self.model.date.desc(), self.model.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_outlet(self, outlet_id: int) -> List[EntryType]:
        stmt = select(self.model).where(self.model.outlet_id == outlet_id).order_by(self.model.date.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def total_for_day(self, entry_date: date, property_id: int) -> float:
        """Sum of ``total_cost`` for one property and day."""
        stmt = select(func.coalesce(func.sum(self.model.total_cost), 0.0)).where(
            self.model.date == entry_date, self.model.property_id == property_id
        )
        result = await self.session.execute(stmt)
        return float(result.scalar_one())

    async def category_totals(
        self,
        start: date,
        end: date,
        *,
        outlet_id: Optional[int] = None,
        property_ids: Optional[Iterable[int]] = None,
    ) -> List[tuple]:
        """Per-day, per-category detail cost sums.

        Returns:
            Rows of ``(date, outlet_id, category_id, category_name, cost)``
        """
        detail = self.detail_model
        stmt = (
            select(
                self.model.date,
                self.model.outlet_id,
                detail.category_id,
                detail.category_name,
                func.sum(detail.cost),
            )
            .join(detail, detail.entry_id == self.model.id)
            .where(self.model.date >= start, self.model.date <= end)
            .group_by(self.model.date, self.model.outlet_id, detail.category_id, detail.category_name)
            .order_by(self.model.date)
        )
        if outlet_id is not None:
            stmt = stmt.where(self.model.outlet_id == outlet_id)
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return []
            stmt = stmt.where(self.model.property_id.in_(ids))
        result = await self.session.execute(stmt)
        return [tuple(row) for row in result.all()]


class FoodCostRepository(CostEntryRepository[FoodCostEntry, FoodCostDetail]):
    """Repository for food cost entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FoodCostEntry, FoodCostDetail)


class BeverageCostRepository(CostEntryRepository[BeverageCostEntry, BeverageCostDetail]):
    """Repository for beverage cost entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BeverageCostEntry, BeverageCostDetail)
