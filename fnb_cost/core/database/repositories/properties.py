"""
Property repository implementation.

Data access for properties, including filtered listing restricted to a set
of property ids.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.properties import Property
from .base import QueryBuilder, SqlRepository


class PropertyRepository(SqlRepository[Property]):
    """Repository for property data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Property)

    async def get_by_code(self, property_code: str) -> Optional[Property]:
        result = await self.session.execute(select(Property).where(Property.property_code == property_code))
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        property_ids: Optional[Iterable[int]] = None,
        is_active: Optional[bool] = None,
        property_type: Optional[str] = None,
        owner_id: Optional[int] = None,
        search_term: Optional[str] = None,
    ) -> List[Property]:
        """List properties matching the given filters.

        Args:
            property_ids: Restrict to these ids (None means no restriction)
            is_active: Active flag filter
            property_type: Property type filter
            owner_id: Owner filter
            search_term: Substring matched against name, code, address and city

        Returns:
            Properties ordered by name
        """
        stmt = select(Property).order_by(Property.name, Property.id)
        if property_ids is not None:
            ids = list(property_ids)
            if not ids:
                return []
            stmt = stmt.where(Property.id.in_(ids))
        stmt = QueryBuilder.apply_filters(
            stmt,
            Property,
            {"is_active": is_active, "property_type": property_type, "owner_id": owner_id},
        )
        if search_term:
            pattern = f"%{search_term.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Property.name).like(pattern),
                    func.lower(Property.property_code).like(pattern),
                    func.lower(Property.address).like(pattern),
                    func.lower(Property.city).like(pattern),
                )
            )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def ids_owned_or_managed_by(self, user_id: int) -> List[int]:
        """Ids of properties where the user is owner or manager."""
        stmt = select(Property.id).where(or_(Property.owner_id == user_id, Property.manager_id == user_id))
        result = await self.session.execute(stmt)
        return [row for row in result.scalars().all()]
