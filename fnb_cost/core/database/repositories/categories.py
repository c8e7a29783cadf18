"""
Category repository implementation.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.categories import Category
from ..entities.cost_entries import BeverageCostDetail, FoodCostDetail
from .base import SqlRepository


class CategoryRepository(SqlRepository[Category]):
    """Repository for cost category data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Category)

    async def list_by_type(self, category_type: Optional[str] = None) -> List[Category]:
        """List categories, optionally only one family (Food or Beverage)."""
        stmt = select(Category).order_by(Category.type, Category.name)
        if category_type:
            stmt = stmt.where(Category.type == category_type)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_name(self, name: str, category_type: str) -> Optional[Category]:
        stmt = select(Category).where(Category.name == name, Category.type == category_type)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def is_in_use(self, category_id: int) -> bool:
        """Whether any food or beverage cost detail references the category."""
        for detail in (FoodCostDetail, BeverageCostDetail):
            stmt = select(detail.id).where(detail.category_id == category_id).limit(1)
            if (await self.session.execute(stmt)).first() is not None:
                return True
        return False
