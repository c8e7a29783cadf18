"""
Security Intelligence Endpoints.

Threat dashboard, metrics, threat resolution, per-user behavioural risk and
security report generation and scheduling.
All endpoints are restricted to super admins.
"""

from typing import List, Literal

from fastapi import APIRouter, Query, status

from fnb_cost.core.models.io.security import (
    BehavioralRisk,
    ScheduledReportRead,
    SecurityDashboard,
    SecurityMetrics,
    SecurityReportRead,
    SecurityReportRequest,
    SecurityReportSchedule,
    SecurityReportsOverview,
    ThreatResolve,
    ThreatResolveResult,
)
from fnb_cost.server.services.deps import SecurityServiceDep

router = APIRouter(tags=["security"])

Timeframe = Literal["1h", "24h", "7d"]


@router.get(
    "/dashboard",
    response_model=SecurityDashboard,
    summary="Security Dashboard",
    description="Detected and stored threats, alerts, metrics and recent security log rows for a time window.",
    response_description="The dashboard.",
    responses={403: {"description": "Super admin only"}},
)
async def security_dashboard(
    security: SecurityServiceDep,
    timeframe: Timeframe = Query("24h"),
) -> SecurityDashboard:
    return await security.dashboard(timeframe)


@router.get(
    "/metrics",
    response_model=SecurityMetrics,
    summary="Security Metrics",
    description="Threat counts by level and type, most targeted users and properties, and mean resolution time.",
    response_description="Security metrics.",
)
async def security_metrics(
    security: SecurityServiceDep,
    timeframe: Timeframe = Query("24h"),
) -> SecurityMetrics:
    return await security.metrics(timeframe)


@router.post(
    "/threats/{threat_id}/resolve",
    response_model=ThreatResolveResult,
    summary="Resolve Threat",
    description="Mark a threat resolved. Stored threats are updated; every resolution is audited.",
    response_description="Resolution result.",
    responses={404: {"description": "Stored threat not found"}},
)
async def resolve_threat(
    threat_id: str, data: ThreatResolve, security: SecurityServiceDep
) -> ThreatResolveResult:
    return await security.resolve_threat(threat_id, data.resolution)


@router.get(
    "/users/{user_id}/risk",
    response_model=BehavioralRisk,
    summary="Behavioural Risk",
    description="Score a user's activity over the last seven days.",
    response_description="Risk factors, score and level.",
)
async def behavioral_risk(user_id: int, security: SecurityServiceDep) -> BehavioralRisk:
    return await security.behavioral_risk(user_id)


@router.get(
    "/reports",
    response_model=SecurityReportsOverview,
    summary="Security Reports Overview",
    description="Report catalogue with data point counts over the last 30 days, recent and scheduled reports.",
    response_description="The reports overview.",
)
async def security_reports(security: SecurityServiceDep) -> SecurityReportsOverview:
    return await security.reports_overview()


@router.post(
    "/reports",
    response_model=SecurityReportRead,
    status_code=status.HTTP_201_CREATED,
    summary="Generate Security Report",
    description="Compute security metrics over the requested window and record the generated report.",
    response_description="The generated report with its metrics.",
)
async def generate_security_report(
    data: SecurityReportRequest, security: SecurityServiceDep
) -> SecurityReportRead:
    return await security.generate_report(data)


@router.get(
    "/reports/scheduled",
    response_model=List[ScheduledReportRead],
    summary="Scheduled Security Reports",
    description="Report schedules recorded in the last 90 days with their next run.",
    response_description="Scheduled reports, newest first.",
)
async def scheduled_security_reports(security: SecurityServiceDep) -> List[ScheduledReportRead]:
    return await security.scheduled_reports()


@router.post(
    "/reports/schedule",
    response_model=ScheduledReportRead,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule Security Report",
    description="Record a recurring security report.",
    response_description="The schedule with its next run.",
)
async def schedule_security_report(
    data: SecurityReportSchedule, security: SecurityServiceDep
) -> ScheduledReportRead:
    return await security.schedule_report(data)


@router.get(
    "/reports/{report_id}",
    response_model=SecurityReportRead,
    summary="Security Report Details",
    description="The recorded parameters of a generated report.",
    response_description="The report record.",
    responses={404: {"description": "Report not found"}},
)
async def security_report_details(report_id: str, security: SecurityServiceDep) -> SecurityReportRead:
    return await security.get_report(report_id)
