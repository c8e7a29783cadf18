"""
Daily financial summary repository implementation.

Provides lookups by (date, property), date-range listing and cursor
pagination over summaries.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.daily_summaries import DailyFinancialSummary
from .base import SqlRepository


class DailySummaryRepository(SqlRepository[DailyFinancialSummary]):
    """Repository for daily financial summaries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, DailyFinancialSummary)

    async def get_by_date(self, summary_date: date, property_id: int) -> Optional[DailyFinancialSummary]:
        """Get the summary for one property and day."""
        stmt = select(DailyFinancialSummary).where(
            DailyFinancialSummary.date == summary_date,
            DailyFinancialSummary.property_id == property_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_in_range(
        self,
        start: date,
        end: date,
        property_ids: Optional[Iterable[int]] = None,
    ) -> List[DailyFinancialSummary]:
        """List summaries whose date lies within ``[start, end]``, oldest first.

        Args:
            start: First day (inclusive)
            end: Last day (inclusive)
            property_ids: Restrict to these properties (None means all)

        Returns:
            Summaries ordered by date
        """
        stmt = select(DailyFinancialSummary).where(
            DailyFinancialSummary.date >= start,
            DailyFinancialSummary.date <= end,
        )
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return []
            stmt = stmt.where(DailyFinancialSummary.property_id.in_(ids))
        stmt = stmt.order_by(DailyFinancialSummary.date, DailyFinancialSummary.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def paginate(
        self,
        *,
        limit: int,
        cursor: Optional[int] = None,
        property_ids: Optional[Iterable[int]] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Tuple[List[DailyFinancialSummary], bool, int]:
        """Cursor pagination ordered by date descending, then id descending.

        The cursor is the id of the last row of the previous page.

        Args:
            limit: Page size
            cursor: Id of the last row already returned
            property_ids: Restrict to these properties (None means all)
            start: Optional first day (inclusive)
            end: Optional last day (inclusive)

        Returns:
            Tuple of (rows, has_more, total_count)
        """
        conditions = []
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return [], False, 0
            conditions.append(DailyFinancialSummary.property_id.in_(ids))
        if start is not None:
            conditions.append(DailyFinancialSummary.date >= start)
        if end is not None:
            conditions.append(DailyFinancialSummary.date <= end)

        count_stmt = select(func.count()).select_from(DailyFinancialSummary).where(*conditions)
        total_count = int((await self.session.execute(count_stmt)).scalar_one())

        stmt = select(DailyFinancialSummary).where(*conditions)
        if cursor is not None:
            anchor = await self.get_by_id(cursor)
            if anchor is not None:
                stmt = stmt.where(
                    (DailyFinancialSummary.date < anchor.date)
                    | ((DailyFinancialSummary.date == anchor.date) & (DailyFinancialSummary.id < anchor.id))
                )
        stmt = stmt.order_by(DailyFinancialSummary.date.desc(), DailyFinancialSummary.id.desc()).limit(limit + 1)
        rows = list((await self.session.execute(stmt)).scalars().all())
        has_more = len(rows) > limit
        return rows[:limit], has_more, total_count
