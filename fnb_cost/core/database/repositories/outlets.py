"""
Outlet repository implementation.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.outlets import Outlet
from .base import SqlRepository


class OutletRepository(SqlRepository[Outlet]):
    """Repository for outlet data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Outlet)

    async def list_for_properties(
        self, property_ids: Optional[Iterable[int]] = None, *, active_only: bool = False
    ) -> List[Outlet]:
        """List outlets, optionally restricted to a set of properties.

        Args:
            property_ids: Restrict to outlets of these properties (None means all)
            active_only: Skip inactive outlets

        Returns:
            Outlets ordered by name
        """
        stmt = select(Outlet).order_by(Outlet.name, Outlet.id)
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return []
            stmt = stmt.where(Outlet.property_id.in_(ids))
        if active_only:
            stmt = stmt.where(Outlet.is_active == True)  # noqa: E712
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_code(self, property_id: int, outlet_code: str) -> Optional[Outlet]:
        stmt = select(Outlet).where(Outlet.property_id == property_id, Outlet.outlet_code == outlet_code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
