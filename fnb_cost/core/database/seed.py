"""
Seed data for a fresh database.

Inserts the default Food and Beverage cost categories and the system
currencies. Seeding is idempotent: categories that already exist (same name
and type) and currencies whose code is taken are left untouched.
"""

from __future__ import annotations

from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from fnb_cost.core.logging_config import get_logger

from .entities.categories import Category
from .entities.currencies import Currency
from .repositories.categories import CategoryRepository
from .repositories.currencies import CurrencyRepository

logger = get_logger(__name__)

DEFAULT_CATEGORIES: Dict[str, List[tuple[str, str]]] = {
    "Food": [
        ("Appetizers", "Starters and small plates"),
        ("Main Courses", "Primary dishes"),
        ("Desserts", "Sweet dishes and pastries"),
        ("Proteins", "Meat, poultry and seafood"),
        ("Vegetables", "Fresh and frozen vegetables"),
        ("Dairy", "Milk, cheese, butter and eggs"),
        ("Grains", "Rice, flour, bread and pasta"),
        ("Seasonings", "Spices, herbs and condiments"),
    ],
    "Beverage": [
        ("Alcoholic", "Spirits, wine and beer"),
        ("Non-Alcoholic", "Soft drinks, juices and water"),
        ("Hot", "Coffee, tea and hot chocolate"),
        ("Cold", "Iced drinks and smoothies"),
        ("Specialty", "Cocktails and signature drinks"),
    ],
}

# code, name, symbol, decimal places, locale; the first one is the default
DEFAULT_CURRENCIES: List[tuple[str, str, str, int, str]] = [
    ("USD", "US Dollar", "$", 2, "en-US"),
    ("EUR", "Euro", "\u20ac", 2, "en-US"),
    ("GBP", "British Pound", "\u00a3", 2, "en-GB"),
    ("JPY", "Japanese Yen", "\u00a5", 0, "ja-JP"),
    ("CAD", "Canadian Dollar", "C$", 2, "en-CA"),
    ("AUD", "Australian Dollar", "A$", 2, "en-AU"),
]


async def seed_default_categories(session: AsyncSession) -> int:
    """Insert missing default categories.

    Args:
        session: Async session to write with

    Returns:
        Number of categories inserted
    """
    repo = CategoryRepository(session)
    inserted = 0
    for category_type, entries in DEFAULT_CATEGORIES.items():
        for name, description in entries:
            if await repo.get_by_name(name, category_type) is not None:
                continue
            session.add(Category(name=name, description=description, type=category_type))
            inserted += 1
    if inserted:
        await session.commit()
    logger.info(f"Seeded {inserted} default categories")
    return inserted


async def seed_default_currencies(session: AsyncSession) -> int:
    """Insert missing system currencies; USD becomes the default on a database without one.

    Returns:
        Number of currencies inserted
    """
    repo = CurrencyRepository(session)
    has_default = await repo.get_default() is not None
    inserted = 0
    for index, (code, name, symbol, decimal_places, locale) in enumerate(DEFAULT_CURRENCIES):
        if await repo.get_by_code(code) is not None:
            continue
        session.add(
            Currency(
                code=code,
                name=name,
                symbol=symbol,
                display_name=f"{code} ({symbol})",
                decimal_places=decimal_places,
                locale=locale,
                is_system_currency=True,
                is_default=index == 0 and not has_default,
            )
        )
        inserted += 1
    if inserted:
        await session.commit()
    logger.info(f"Seeded {inserted} default currencies")
    return inserted
