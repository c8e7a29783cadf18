"""Process-wide engine and session factory for the API.

Built from ``settings.database_url`` at import time; tests build their own
engine with ``utils`` and override ``get_session`` instead.
"""

from __future__ import annotations

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from fnb_cost.server.core.config import settings

from .seed import seed_default_categories, seed_default_currencies
from .utils import create_all, create_engine, create_sessionmaker

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create missing tables, then seed the standard categories and system currencies when enabled."""
    await create_all(engine)
    if not settings.seed_default_categories:
        return
    async with async_session_maker() as session:
        await seed_default_categories(session)
        await seed_default_currencies(session)
