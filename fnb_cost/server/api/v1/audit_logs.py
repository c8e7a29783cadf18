"""
Audit Log Endpoints.

Read access to the audit trail: filtered listing, recent activity,
statistics, the user activity report, CSV export and retention cleanup.
"""

from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.audit_logs import (
    AuditCleanupResult,
    AuditLogFilters,
    AuditLogPage,
    AuditLogRead,
    AuditLogStats,
    UserActivityReport,
)
from fnb_cost.server.services.deps import ActivityReportServiceDep, AuditLogServiceDep

logger = get_logger(__name__)

router = APIRouter(tags=["audit-logs"])


def get_filters(
    user_id: Optional[int] = Query(None),
    property_id: Optional[int] = Query(None),
    resource: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    include_actions: List[str] = Query([], description="Only these actions"),
    exclude_actions: List[str] = Query([], description="Skip these actions"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None, description="Inclusive; covers the whole day"),
    search_term: Optional[str] = Query(None, description="Match action, resource, resource id, IP or user"),
) -> AuditLogFilters:
    return AuditLogFilters(
        user_id=user_id,
        property_id=property_id,
        resource=resource,
        action=action,
        include_actions=include_actions,
        exclude_actions=exclude_actions,
        date_from=date_from,
        date_to=date_to,
        search_term=search_term,
    )


FiltersDep = Annotated[AuditLogFilters, Depends(get_filters)]


@router.get(
    "",
    response_model=AuditLogPage,
    summary="List Audit Logs",
    description="Filtered, paginated audit trail, newest first. Super admins and property admins only.",
    response_description="One page of audit rows with totals.",
    responses={403: {"description": "Insufficient role"}},
)
async def list_audit_logs(
    audit_logs: AuditLogServiceDep,
    filters: FiltersDep,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=500, description="Defaults to the configured page size"),
) -> AuditLogPage:
    return await audit_logs.list_logs(filters, page=page, limit=limit)


@router.get(
    "/recent",
    response_model=List[AuditLogRead],
    summary="Recent Activity",
    description="The most recent audit rows visible to the caller.",
    response_description="Recent audit rows.",
)
async def recent_activity(
    audit_logs: AuditLogServiceDep,
    limit: int = Query(10, ge=1, le=100),
) -> List[AuditLogRead]:
    return await audit_logs.recent(limit)


@router.get(
    "/stats",
    response_model=AuditLogStats,
    summary="Audit Statistics",
    description="Total and today's row counts, distinct users, and the top actions and resources.",
    response_description="Audit statistics.",
)
async def audit_stats(audit_logs: AuditLogServiceDep) -> AuditLogStats:
    return await audit_logs.stats()


@router.get(
    "/user-activity",
    response_model=UserActivityReport,
    summary="User Activity Audit Report",
    description=(
        "Per-user activity, risk score and unusual patterns, daily volume, action and resource analytics "
        "and login figures over whole days. Super admins and property admins only."
    ),
    response_description="The activity report.",
    responses={403: {"description": "Not an admin, or property outside the caller's access"}},
)
async def user_activity_report(
    activity: ActivityReportServiceDep,
    start: date = Query(...),
    end: date = Query(...),
    property_id: Optional[int] = Query(None),
) -> UserActivityReport:
    return await activity.user_activity_report(start, end, property_id=property_id)


@router.get(
    "/export",
    summary="Export Audit Logs",
    description="CSV export of the filtered audit trail. Super admin only; the export itself is audited.",
    response_description="CSV file.",
    responses={200: {"content": {"text/csv": {}}}, 403: {"description": "Super admin only"}},
)
async def export_audit_logs(audit_logs: AuditLogServiceDep, filters: FiltersDep) -> Response:
    content = await audit_logs.export_csv(filters)
    filename = f"audit-logs-{utc_now().strftime('%Y%m%d-%H%M%S')}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete(
    "/cleanup",
    response_model=AuditCleanupResult,
    summary="Clean Up Audit Logs",
    description="Delete audit rows older than the retention period. Super admin only.",
    response_description="Number of deleted rows.",
)
async def cleanup_audit_logs(
    audit_logs: AuditLogServiceDep,
    retention_days: Optional[int] = Query(None, ge=1, description="Defaults to the configured retention"),
) -> AuditCleanupResult:
    return await audit_logs.cleanup(retention_days)
