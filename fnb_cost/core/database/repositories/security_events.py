"""
Security event repository implementation.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..entities.security_events import SecurityEvent
from .base import SqlRepository


class SecurityEventRepository(SqlRepository[SecurityEvent]):
    """Repository for persisted security threats."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SecurityEvent)

    async def list_unresolved_since(self, since: datetime) -> List[SecurityEvent]:
        stmt = (
            select(SecurityEvent)
            .where(SecurityEvent.timestamp >= since, SecurityEvent.resolved == False)  # noqa: E712
            .order_by(SecurityEvent.timestamp.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_resolved(self) -> List[SecurityEvent]:
        stmt = select(SecurityEvent).where(
            SecurityEvent.resolved == True,  # noqa: E712
            SecurityEvent.resolved_at != None,  # noqa: E711
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
