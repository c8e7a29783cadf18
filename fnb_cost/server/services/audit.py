"""
Audit trail service.

``AuditService`` writes audit rows for the calling user and request; write
failures are logged and swallowed so that auditing never fails the operation
being audited. ``AuditLogService`` serves the read side: filtered listing,
statistics, CSV export and retention cleanup.
"""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from fastapi.encoders import jsonable_encoder
from sqlmodel import SQLModel

from fnb_cost.core.analytics.audit_formatting import format_details
from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import AuditLog, User
from fnb_cost.core.database.repositories import AuditLogQuery, SqlRepoBundle
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import UserRole
from fnb_cost.core.models.io.audit_logs import (
    AuditCleanupResult,
    AuditLogFilters,
    AuditLogPage,
    AuditLogRead,
    AuditLogStats,
    AuditUser,
)
from fnb_cost.server.core.config import settings

from .access import AccessControl

logger = get_logger(__name__)

SENSITIVE_FIELDS = ("password", "token", "secret", "key", "api_key", "access_token")
SNAPSHOT_EXCLUDE = {"password_hash"}

CLIENT_IP_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
    "x-client-ip",
    "x-cluster-client-ip",
    "forwarded-for",
    "forwarded",
)

CSV_HEADER = [
    "Timestamp",
    "User",
    "User Email",
    "Action",
    "Resource",
    "Resource ID",
    "Property ID",
    "IP Address",
    "User Agent",
    "Details",
]


@dataclass(frozen=True)
class ClientInfo:
    """Network origin of the current request."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


def resolve_client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> Optional[str]:
    """Pick the client address from proxy headers, falling back to the socket peer.

    Each header may carry a comma-separated chain; the first entry that is not
    ``unknown`` wins.
    """
    for header in CLIENT_IP_HEADERS:
        value = headers.get(header)
        if not value:
            continue
        for candidate in value.split(","):
            candidate = candidate.strip()
            if candidate and candidate.lower() != "unknown":
                return candidate
    return peer


def sanitize(data: Any) -> Any:
    """Redact well-known secret fields, recursively."""
    if isinstance(data, Mapping):
        cleaned = {}
        for key, value in data.items():
            if key in SENSITIVE_FIELDS and value:
                cleaned[key] = "[REDACTED]"
            else:
                cleaned[key] = sanitize(value)
        return cleaned
    if isinstance(data, list):
        return [sanitize(item) for item in data]
    return data


def snapshot(entity: Any) -> Optional[Dict[str, Any]]:
    """JSON-safe dict of an entity or model for ``before``/``after`` values."""
    if entity is None:
        return None
    if isinstance(entity, SQLModel):
        data = entity.model_dump(exclude=SNAPSHOT_EXCLUDE)
    else:
        data = dict(entity)
    return jsonable_encoder(data)


def diff_changes(before: Mapping[str, Any], after: Mapping[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Field-level ``{"from", "to"}`` map between two snapshots, ignoring ``updated_at``."""
    changes: Dict[str, Dict[str, Any]] = {}
    for key in dict.fromkeys([*before.keys(), *after.keys()]):
        if key == "updated_at":
            continue
        if before.get(key) != after.get(key):
            changes[key] = {"from": before.get(key), "to": after.get(key)}
    return changes


class AuditService:
    """Write audit entries on behalf of one user and request.

    Args:
        repos: Repositories bound to the request's session
        user: Acting user, or None for system and anonymous actions
        client: Request origin recorded on every row
    """

    def __init__(self, repos: SqlRepoBundle, user: Optional[User], client: ClientInfo = ClientInfo()) -> None:
        self.repos = repos
        self.user = user
        self.client = client

    async def log(
        self,
        action: str,
        resource: str,
        *,
        resource_id: Any = None,
        details: Optional[Dict[str, Any]] = None,
        property_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Optional[AuditLog]:
        """Persist one audit row; returns None when the write failed."""
        entry = AuditLog(
            user_id=user_id if user_id is not None else (self.user.id if self.user else None),
            property_id=property_id,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=jsonable_encoder(sanitize(details)) if details is not None else None,
            ip_address=self.client.ip_address,
            user_agent=self.client.user_agent,
        )
        try:
            return await self.repos.audit_logs.create(entry)
        except Exception as e:
            logger.error(f"Failed to write audit log {action} {resource}/{resource_id}: {e}", exc_info=True)
            await self.repos.audit_logs.session.rollback()
            return None

    async def log_data_change(
        self,
        action: str,
        resource: str,
        resource_id: Any,
        *,
        before: Any = None,
        after: Any = None,
        property_id: Optional[int] = None,
    ) -> Optional[AuditLog]:
        """Record CREATE, UPDATE or DELETE with the affected values."""
        before_data = snapshot(before)
        after_data = snapshot(after)
        if action == "CREATE":
            details: Dict[str, Any] = {"created": after_data}
        elif action == "DELETE":
            details = {"deleted": before_data}
        else:
            details = {
                "before": before_data,
                "after": after_data,
                "changes": diff_changes(before_data or {}, after_data or {}),
            }
        return await self.log(action, resource, resource_id=resource_id, details=details, property_id=property_id)

    async def log_auth_action(
        self, action: str, user_id: Optional[int], details: Optional[Dict[str, Any]] = None
    ) -> Optional[AuditLog]:
        """Record LOGIN, LOGOUT, FAILED_LOGIN, PASSWORD_CHANGE or PASSWORD_RESET."""
        return await self.log(
            action,
            "auth",
            resource_id=user_id,
            details={**(details or {}), "ip": self.client.ip_address},
            user_id=user_id,
        )

    async def log_property_access(
        self,
        action: str,
        target_user_id: int,
        property_id: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        """Record GRANT_PROPERTY_ACCESS or REVOKE_PROPERTY_ACCESS."""
        return await self.log(
            action,
            "property_access",
            resource_id=f"{target_user_id}-{property_id}",
            details={"target_user_id": target_user_id, "property_id": property_id, **(details or {})},
            property_id=property_id,
        )

    async def log_bulk_operation(
        self,
        action: str,
        resource: str,
        *,
        total_items: int,
        success_count: int,
        failure_count: int,
        property_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        return await self.log(
            action,
            resource,
            details={
                "bulk_operation": True,
                "total_items": total_items,
                "success_count": success_count,
                "failure_count": failure_count,
                **(details or {}),
            },
            property_id=property_id,
        )

    async def log_report_export(
        self,
        report_type: str,
        filters: Optional[Dict[str, Any]] = None,
        *,
        property_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AuditLog]:
        return await self.log(
            "EXPORT",
            report_type,
            details={
                "report_type": report_type,
                "filters": jsonable_encoder(filters or {}),
                "exported_at": utc_now().isoformat(),
                **(details or {}),
            },
            property_id=property_id,
        )


def _day_bounds(date_from: Optional[date], date_to: Optional[date]) -> tuple:
    start = datetime.combine(date_from, time.min) if date_from else None
    end = datetime.combine(date_to, time.max) if date_to else None
    return start, end


def _csv_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M:%S")


class AuditLogService:
    """Read, export and clean up the audit trail."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _visible_properties(self) -> Optional[Sequence[int]]:
        self.access.require_role(UserRole.super_admin, UserRole.property_admin)
        return await self.access.accessible_property_ids()

    async def _query(self, filters: AuditLogFilters) -> AuditLogQuery:
        start, end = _day_bounds(filters.date_from, filters.date_to)
        return AuditLogQuery(
            user_id=filters.user_id,
            property_id=filters.property_id,
            resource=filters.resource,
            action=filters.action,
            include_actions=list(filters.include_actions),
            exclude_actions=list(filters.exclude_actions),
            date_from=start,
            date_to=end,
            search_term=filters.search_term,
            visible_property_ids=await self._visible_properties(),
        )

    @staticmethod
    def _read(log: AuditLog, user: Optional[User]) -> AuditLogRead:
        read = AuditLogRead.model_validate(log)
        if user is not None:
            read.user = AuditUser.model_validate(user)
        return read

    async def list_logs(self, filters: AuditLogFilters, *, page: int = 1, limit: Optional[int] = None) -> AuditLogPage:
        """One page of audit rows, newest first.

        Args:
            filters: Query filters
            page: 1-based page number
            limit: Page size; defaults to the configured audit page size

        Returns:
            AuditLogPage with total and total_pages
        """
        limit = limit or settings.audit.page_size
        page = max(page, 1)
        query = await self._query(filters)
        rows, total = await self.repos.audit_logs.search(query, limit=limit, offset=(page - 1) * limit)
        return AuditLogPage(
            logs=[self._read(log, user) for log, user in rows],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    async def recent(self, limit: int = 10) -> List[AuditLogRead]:
        visible = await self._visible_properties()
        rows = await self.repos.audit_logs.recent(limit=limit, property_ids=visible)
        return [self._read(log, user) for log, user in rows]

    async def stats(self) -> AuditLogStats:
        visible = await self._visible_properties()
        today_start = datetime.combine(utc_now().date(), time.min)
        return AuditLogStats.model_validate(await self.repos.audit_logs.stats(today_start, property_ids=visible))

    async def export_csv(self, filters: AuditLogFilters) -> str:
        """Render matching rows as CSV, capped at the configured row limit.

        The export itself is recorded as an EXPORT audit entry.
        """
        self.access.require_super_admin()
        query = await self._query(filters)
        rows, _ = await self.repos.audit_logs.search(query, limit=settings.audit.export_max_rows)

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for log, user in rows:
            writer.writerow(
                [
                    _csv_timestamp(log.timestamp),
                    (user.name or user.email) if user else "System",
                    user.email if user else "",
                    log.action,
                    log.resource,
                    log.resource_id or "",
                    log.property_id if log.property_id is not None else "",
                    log.ip_address or "",
                    log.user_agent or "",
                    format_details(log.details),
                ]
            )

        await self.audit.log(
            "EXPORT",
            "audit_log",
            details={"filters": filters.model_dump(mode="json", exclude_defaults=True), "export_count": len(rows)},
        )
        logger.info(f"User {self.user.id} exported {len(rows)} audit log rows")
        return buffer.getvalue()

    async def cleanup(self, retention_days: Optional[int] = None) -> AuditCleanupResult:
        """Delete rows older than ``retention_days`` (default from settings)."""
        self.access.require_super_admin()
        days = retention_days if retention_days is not None else settings.audit.retention_days
        cutoff = utc_now() - timedelta(days=days)
        deleted = await self.repos.audit_logs.delete_older_than(cutoff)
        logger.info(f"Audit cleanup removed {deleted} rows older than {days} days")
        await self.audit.log("DELETE", "audit_log", details={"retention_days": days, "deleted_count": deleted})
        return AuditCleanupResult(deleted_count=deleted)
