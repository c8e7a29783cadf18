"""
Audit log repository implementation.

This module provides data access for the append-only audit trail: filtered
and paginated queries joined with the acting user, aggregate statistics and
retention cleanup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...errors import ConflictError
from ..entities.audit_logs import AuditLog
from ..entities.users import User
from .base import QueryBuilder, SqlRepository


@dataclass
class AuditLogQuery:
    """Filter set for audit log searches.

    ``date_to`` is compared with ``<=`` so callers pass the end of the day
    when they mean a whole day.
    """

    user_id: Optional[int] = None
    property_id: Optional[int] = None
    resource: Optional[str] = None
    resource_id: Optional[str] = None
    action: Optional[str] = None
    include_actions: List[str] = field(default_factory=list)
    exclude_actions: List[str] = field(default_factory=list)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    search_term: Optional[str] = None
    # None means unrestricted; otherwise these properties plus rows with no property
    visible_property_ids: Optional[Sequence[int]] = None


class AuditLogRepository(SqlRepository[AuditLog]):
    """Repository for audit log rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditLog)

    async def update(self, entity: AuditLog) -> AuditLog:
        raise ConflictError("Audit logs are append-only")

    def _filtered(self, stmt, query: AuditLogQuery):
        stmt = QueryBuilder.apply_filters(
            stmt,
            AuditLog,
            {
                "user_id": query.user_id,
                "property_id": query.property_id,
                "resource": query.resource,
                "resource_id": query.resource_id,
                "action": query.action,
            },
        )
        if query.include_actions:
            stmt = stmt.where(AuditLog.action.in_(query.include_actions))
        if query.exclude_actions:
            stmt = stmt.where(AuditLog.action.not_in(query.exclude_actions))
        if query.date_from is not None:
            stmt = stmt.where(AuditLog.timestamp >= query.date_from)
        if query.date_to is not None:
            stmt = stmt.where(AuditLog.timestamp <= query.date_to)
        stmt = self._scoped(stmt, query.visible_property_ids)
        if query.search_term:
            pattern = f"%{query.search_term.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(AuditLog.action).like(pattern),
                    func.lower(AuditLog.resource).like(pattern),
                    func.lower(AuditLog.resource_id).like(pattern),
                    func.lower(AuditLog.ip_address).like(pattern),
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                )
            )
        return stmt

    async def search(
        self, query: AuditLogQuery, *, limit: int, offset: int = 0
    ) -> Tuple[List[Tuple[AuditLog, Optional[User]]], int]:
        """Run a filtered search, newest first.

        Args:
            query: Filter set
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (rows of (log, user or None), total matching rows)
        """
        base = select(AuditLog, User).outerjoin(User, User.id == AuditLog.user_id)
        stmt = self._filtered(base, query)
        stmt = stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).offset(offset)
        rows = [(log, user) for log, user in (await self.session.execute(stmt)).all()]

        count_base = select(func.count(AuditLog.id)).select_from(AuditLog).outerjoin(User, User.id == AuditLog.user_id)
        total = int((await self.session.execute(self._filtered(count_base, query))).scalar_one())
        return rows, total

    async def recent(self, limit: int = 10, property_ids: Optional[Sequence[int]] = None) -> List[Tuple[AuditLog, Optional[User]]]:
        rows, _ = await self.search(AuditLogQuery(visible_property_ids=property_ids), limit=limit)
        return rows

    async def list_between(
        self,
        date_from: datetime,
        date_to: datetime,
        *,
        property_id: Optional[int] = None,
        property_ids: Optional[Sequence[int]] = None,
    ) -> List[Tuple[AuditLog, Optional[User]]]:
        """Every row of a closed time range with its user, newest first."""
        query = AuditLogQuery(
            property_id=property_id, date_from=date_from, date_to=date_to, visible_property_ids=property_ids
        )
        stmt = self._filtered(select(AuditLog, User).outerjoin(User, User.id == AuditLog.user_id), query)
        stmt = stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        return [(log, user) for log, user in (await self.session.execute(stmt)).all()]

    async def list_since(self, since: datetime, *, user_id: Optional[int] = None) -> List[AuditLog]:
        """All rows at or after ``since``, oldest first."""
        stmt = select(AuditLog).where(AuditLog.timestamp >= since)
        if user_id is not None:
            stmt = stmt.where(AuditLog.user_id == user_id)
        stmt = stmt.order_by(AuditLog.timestamp, AuditLog.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _scoped(self, stmt, property_ids: Optional[Sequence[int]]):
        if property_ids is None:
            return stmt
        return stmt.where(
            or_(
                AuditLog.property_id.in_(list(property_ids)),
                AuditLog.property_id == None,  # noqa: E711
            )
        )

    async def stats(
        self, today_start: datetime, top_n: int = 5, property_ids: Optional[Sequence[int]] = None
    ) -> Dict[str, Any]:
        """Aggregate counts over the rows visible to the caller.

        Args:
            today_start: Start of the current day for the ``today_logs`` count
            top_n: Number of top actions and resources to return
            property_ids: None for every row; otherwise these properties plus rows with no property

        Returns:
            Dict with total_logs, today_logs, unique_users, top_actions, top_resources
        """

        async def _count(expr, *conditions) -> int:
            stmt = self._scoped(select(expr).select_from(AuditLog).where(*conditions), property_ids)
            return int((await self.session.execute(stmt)).scalar_one())

        async def _top(column, key: str) -> List[Dict[str, Any]]:
            stmt = (
                select(column, func.count(AuditLog.id).label("count"))
                .group_by(column)
                .order_by(func.count(AuditLog.id).desc(), column)
                .limit(top_n)
            )
            stmt = self._scoped(stmt, property_ids)
            return [{key: name, "count": int(count)} for name, count in (await self.session.execute(stmt)).all()]

        return {
            "total_logs": await _count(func.count(AuditLog.id)),
            "today_logs": await _count(func.count(AuditLog.id), AuditLog.timestamp >= today_start),
            "unique_users": await _count(func.count(func.distinct(AuditLog.user_id))),
            "top_actions": await _top(AuditLog.action, "action"),
            "top_resources": await _top(AuditLog.resource, "resource"),
        }

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete rows strictly older than ``cutoff``.

        Returns:
            Number of deleted rows
        """
        result = await self.session.execute(delete(AuditLog).where(AuditLog.timestamp < cutoff))
        await self.session.commit()
        return int(result.rowcount or 0)
