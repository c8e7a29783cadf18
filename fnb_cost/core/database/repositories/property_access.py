"""
Property access repository implementation.

Data access for per-property grants, including the set of properties a user
can currently reach and cleanup of expired grants.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import utc_now
from ..entities.property_access import PropertyAccess
from .base import SqlRepository


class PropertyAccessRepository(SqlRepository[PropertyAccess]):
    """Repository for property access grants."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PropertyAccess)

    async def get_grant(self, user_id: int, property_id: int) -> Optional[PropertyAccess]:
        stmt = select(PropertyAccess).where(
            PropertyAccess.user_id == user_id,
            PropertyAccess.property_id == property_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_active_grant(
        self, user_id: int, property_id: int, now: Optional[datetime] = None
    ) -> Optional[PropertyAccess]:
        """Get a grant only if it has not expired."""
        grant = await self.get_grant(user_id, property_id)
        if grant is None or grant.is_expired(now):
            return None
        return grant

    async def list_for_user(self, user_id: int, *, include_expired: bool = False) -> List[PropertyAccess]:
        stmt = select(PropertyAccess).where(PropertyAccess.user_id == user_id)
        if not include_expired:
            stmt = stmt.where(or_(PropertyAccess.expires_at == None, PropertyAccess.expires_at > utc_now()))  # noqa: E711
        stmt = stmt.order_by(PropertyAccess.property_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_property(self, property_id: int) -> List[PropertyAccess]:
        stmt = (
            select(PropertyAccess)
            .where(PropertyAccess.property_id == property_id)
            .order_by(PropertyAccess.granted_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def accessible_property_ids(self, user_id: int) -> List[int]:
        """Ids of properties the user holds an unexpired grant on, in grant order."""
        stmt = (
            select(PropertyAccess.property_id)
            .where(PropertyAccess.user_id == user_id)
            .where(or_(PropertyAccess.expires_at == None, PropertyAccess.expires_at > utc_now()))  # noqa: E711
            .order_by(PropertyAccess.granted_at, PropertyAccess.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_expired(self, now: Optional[datetime] = None) -> int:
        """Remove grants whose expiry has passed.

        Returns:
            Number of removed grants
        """
        stmt = delete(PropertyAccess).where(
            PropertyAccess.expires_at != None,  # noqa: E711
            PropertyAccess.expires_at <= (now or utc_now()),
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount or 0)
