"""
Currency repository implementation.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.currencies import Currency
from ..entities.properties import Property
from .base import SqlRepository


class CurrencyRepository(SqlRepository[Currency]):
    """Repository for currency data access operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Currency)

    async def search(
        self,
        *,
        is_active: Optional[bool] = None,
        is_system_currency: Optional[bool] = None,
        search_term: Optional[str] = None,
    ) -> List[Currency]:
        """Default first, then system currencies, then by name."""
        stmt = select(Currency).order_by(Currency.is_default.desc(), Currency.is_system_currency.desc(), Currency.name)
        if is_active is not None:
            stmt = stmt.where(Currency.is_active == is_active)
        if is_system_currency is not None:
            stmt = stmt.where(Currency.is_system_currency == is_system_currency)
        if search_term:
            pattern = f"%{search_term.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Currency.code).like(pattern),
                    func.lower(Currency.name).like(pattern),
                    func.lower(Currency.display_name).like(pattern),
                )
            )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_code(self, code: str) -> Optional[Currency]:
        stmt = select(Currency).where(Currency.code == code.upper())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_default(self) -> Optional[Currency]:
        """The active default currency, if any."""
        stmt = select(Currency).where(Currency.is_default.is_(True), Currency.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def make_default(self, currency: Currency) -> Currency:
        """Clear the default flag everywhere and set it on ``currency`` in one commit."""
        await self.session.execute(update(Currency).where(Currency.is_default.is_(True)).values(is_default=False))
        currency.is_default = True
        return await self.update(currency)

    async def count_properties(self, currency_id: int) -> int:
        stmt = select(func.count(Property.id)).where(Property.currency_id == currency_id)
        return int((await self.session.execute(stmt)).scalar_one())
