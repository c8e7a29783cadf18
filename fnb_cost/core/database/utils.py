"""Engine and session factory construction for the cost database.

Postgres (asyncpg) runs in deployment, while tests and local runs use SQLite
through aiosqlite. Both are built here so ``session`` and the test fixtures
share a single code path.
"""

from __future__ import annotations

import re

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .base import Base

_POSTGRES_SCHEME = re.compile(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://")


def create_engine(db_url: str) -> AsyncEngine:
    """Build an async engine for ``db_url``.

    Hosted Postgres URLs often arrive as ``postgres://`` or with a sync
    driver; those are pinned to ``postgresql+asyncpg://``.
    """
    url = _POSTGRES_SCHEME.sub("postgresql+asyncpg://", db_url, count=1)
    if url.startswith("sqlite"):
        return create_async_engine(url, connect_args={"check_same_thread": False})
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Entries and summaries are serialized after commit
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create any missing tables. Migrations own the schema in production."""
    from . import entities  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
