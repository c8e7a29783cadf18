"""
User repository implementation.

Data access for application users: lookup by email, filtered listing and
per-role counts.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.users import User
from .base import QueryBuilder, SqlRepository


class UserRepository(SqlRepository[User]):
    """Repository for user data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address (case-insensitive)."""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, user_ids: List[int]) -> Dict[int, User]:
        """Load several users keyed by id."""
        if not user_ids:
            return {}
        result = await self.session.execute(select(User).where(User.id.in_(set(user_ids))))
        return {user.id: user for user in result.scalars().all()}

    async def search(
        self,
        *,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
        search_term: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[User]:
        """List users filtered by role, active flag and a name/email search term.

        Args:
            role: Only users with this role
            is_active: Only active or only inactive users
            search_term: Substring matched against name and email
            limit: Maximum records to return
            offset: Records to skip

        Returns:
            Users ordered by name
        """
        stmt = select(User).order_by(User.name, User.id)
        stmt = QueryBuilder.apply_filters(stmt, User, {"role": role, "is_active": is_active})
        if search_term:
            pattern = f"%{search_term.lower()}%"
            stmt = stmt.where(or_(func.lower(User.name).like(pattern), func.lower(User.email).like(pattern)))
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_role(self) -> Dict[str, int]:
        """Number of users per role."""
        stmt = select(User.role, func.count()).group_by(User.role)
        result = await self.session.execute(stmt)
        return {role: int(count) for role, count in result.all()}
