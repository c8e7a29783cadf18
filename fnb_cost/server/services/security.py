"""
Security intelligence service.

Builds the security dashboard from recent security-related audit rows and the
persisted ``security_events`` table, resolves threats, scores the recent
behaviour of a single user, and generates and schedules security reports.
Generated and scheduled reports are recorded only as audit rows. Every
operation is restricted to super admins.
"""

from __future__ import annotations

import uuid
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional, Tuple

from fnb_cost.core.analytics import behavioral
from fnb_cost.core.analytics.threat_detection import (
    TIMEFRAME_LABELS,
    SecurityLogRow,
    Threat,
    ThreatDetector,
    build_alerts,
    compute_metrics,
    is_security_action,
)
from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import AuditLog, SecurityEvent, User
from fnb_cost.core.database.repositories import AuditLogQuery, SqlRepoBundle
from fnb_cost.core.errors import NotFoundError, ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.io.security import (
    AlertRead,
    BehavioralRisk,
    RiskFactorRead,
    ScheduledReportRead,
    SecurityDashboard,
    SecurityLogRead,
    SecurityMetrics,
    SecurityReportMetrics,
    SecurityReportRead,
    SecurityReportRequest,
    SecurityReportSchedule,
    SecurityReportsOverview,
    SecurityReportType,
    SecuritySummary,
    ThreatRead,
    ThreatResolveResult,
)
from fnb_cost.core.monitoring import log_security_event
from fnb_cost.server.core.config import settings

from .access import AccessControl
from .audit import AuditService

logger = get_logger(__name__)

TIMEFRAMES = {"1h": timedelta(hours=1), "24h": timedelta(hours=24), "7d": timedelta(days=7)}
EVENT_PREFIX = "event_"


def window_start(timeframe: str, now: datetime) -> datetime:
    if timeframe not in TIMEFRAMES:
        raise ValidationFailedError(f"Unknown timeframe {timeframe}; expected one of {', '.join(TIMEFRAMES)}")
    return now - TIMEFRAMES[timeframe]


def threat_from_event(event: SecurityEvent) -> Threat:
    return Threat(
        id=f"{EVENT_PREFIX}{event.id}",
        level=event.severity,
        type=event.type,
        description=event.description,
        timestamp=event.timestamp,
        user_id=event.user_id,
        property_id=event.property_id,
        ip=event.ip,
        details=dict(event.event_metadata or {}),
        resolved=event.resolved,
        resolved_at=event.resolved_at,
        resolved_by=event.resolved_by,
        persisted=True,
    )


def log_row(log: AuditLog) -> SecurityLogRow:
    return SecurityLogRow(
        action=log.action,
        timestamp=log.timestamp,
        user_id=log.user_id,
        ip_address=log.ip_address,
        details=log.details if isinstance(log.details, dict) else {},
    )


REPORT_GENERATED = "SECURITY_REPORT_GENERATED"
REPORT_SCHEDULED = "SECURITY_REPORT_SCHEDULED"
REPORT_WINDOW = timedelta(days=30)
SCHEDULE_WINDOW = timedelta(days=90)
RECENT_REPORTS = 5
MAX_SCHEDULES = 20
INCIDENT_ACTIONS = frozenset({"FAILED_LOGIN", "RATE_LIMIT_EXCEEDED", "PERMISSION_DENIED", "UNAUTHORIZED_ACCESS"})

REPORT_TYPES: Dict[str, Tuple[str, str]] = {
    "threat_landscape": ("Threat Landscape", "Security-related activity and detected threats"),
    "risk_assessment": ("Risk Assessment", "Behavioural risk of the users involved in security activity"),
    "compliance": ("Compliance Report", "Audit trail exports and retention clean-ups"),
    "incident_analysis": ("Incident Analysis", "Failed logins, rate limiting and denied access"),
    "executive_dashboard": ("Executive Summary", "High-level overview of all audited activity"),
}

# Default run time per frequency; weekly runs on Mondays, monthly on the 1st, quarterly on the 1st of a quarter
DEFAULT_RUN_TIMES = {"daily": time(8), "weekly": time(10), "monthly": time(12), "quarterly": time(15)}


def next_run(frequency: str, now: datetime, at: Optional[str] = None) -> datetime:
    """First run of a schedule strictly after ``now``."""
    run_time = time.fromisoformat(at) if at else DEFAULT_RUN_TIMES[frequency]
    today = now.date()
    if frequency == "daily":
        candidate = datetime.combine(today, run_time)
        return candidate if candidate > now else candidate + timedelta(days=1)
    if frequency == "weekly":
        candidate = datetime.combine(today + timedelta(days=-today.weekday() % 7), run_time)
        return candidate if candidate > now else candidate + timedelta(days=7)

    step = 1 if frequency == "monthly" else 3
    month = today.month if frequency == "monthly" else (today.month - 1) // 3 * 3 + 1
    candidate = datetime.combine(today.replace(month=month, day=1), run_time)
    while candidate <= now:
        year, month = divmod(candidate.month - 1 + step, 12)
        candidate = candidate.replace(year=candidate.year + year, month=month + 1)
    return candidate


def report_data_points(logs: List[AuditLog]) -> Dict[str, int]:
    security = [log for log in logs if is_security_action(log.action)]
    return {
        "threat_landscape": len(security),
        "risk_assessment": len({log.user_id for log in security if log.user_id is not None}),
        "compliance": sum(1 for log in logs if log.action == "EXPORT" or log.resource == "audit_log"),
        "incident_analysis": sum(1 for log in logs if log.action in INCIDENT_ACTIONS),
        "executive_dashboard": len(logs),
    }


class SecurityService:
    """Security dashboards and risk scoring for a super admin."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _security_logs(self, since: datetime) -> List[AuditLog]:
        """The most recent security rows of the window, oldest first."""
        logs = [log for log in await self.repos.audit_logs.list_since(since) if is_security_action(log.action)]
        return logs[-settings.security.max_security_logs :]

    async def _resolution_hours(self) -> List[float]:
        return [
            (event.resolved_at - event.timestamp).total_seconds() / 3600
            for event in await self.repos.security_events.list_resolved()
        ]

    async def dashboard(self, timeframe: str = "24h") -> SecurityDashboard:
        """Detected and persisted threats, alerts and metrics for one window."""
        self.access.require_super_admin()
        now = utc_now()
        since = window_start(timeframe, now)

        logs = await self._security_logs(since)
        rows = [log_row(log) for log in logs]
        known = [threat_from_event(e) for e in await self.repos.security_events.list_unresolved_since(since)]

        detector = ThreatDetector(
            timeframe,
            failed_login_threshold=settings.security.failed_login_threshold,
            ip_failure_threshold=settings.security.ip_failure_threshold,
            now=now,
        )
        detected = detector.detect(rows, known)
        threats = known + detected
        alerts = build_alerts(detected, now)
        for threat in detected:
            if threat.level in ("high", "critical"):
                log_security_event(threat.type, threat.level, threat_id=threat.id, user_id=threat.user_id, ip=threat.ip)
        metrics = compute_metrics(threats, detector.failed_logins_by_user(rows), await self._resolution_hours())

        active = [t for t in threats if not t.resolved]
        logger.info(
            f"Security dashboard ({TIMEFRAME_LABELS[timeframe]}): {len(logs)} rows, "
            f"{len(detected)} detected, {len(known)} persisted threats"
        )
        return SecurityDashboard(
            timeframe=timeframe,
            threats=[ThreatRead.model_validate(t) for t in threats],
            alerts=[AlertRead.model_validate(a) for a in alerts],
            metrics=SecurityMetrics.model_validate(metrics),
            summary=SecuritySummary(
                total_active=len(active),
                critical=sum(1 for t in active if t.level == "critical"),
                high=sum(1 for t in active if t.level == "high"),
                last_alert_time=max((a.sent_at for a in alerts), default=None),
            ),
            recent_logs=[SecurityLogRead.model_validate(log) for log in reversed(logs)],
        )

    async def metrics(self, timeframe: str = "24h") -> SecurityMetrics:
        return (await self.dashboard(timeframe)).metrics

    async def resolve_threat(self, threat_id: str, resolution: str) -> ThreatResolveResult:
        """Mark a threat resolved.

        Persisted threats (``event_<id>``) are updated in place. Detected
        threats exist only for the request that found them, so for those only
        the audit entry records the resolution.
        """
        self.access.require_super_admin()
        now = utc_now()
        persisted = False
        event: Optional[SecurityEvent] = None
        if threat_id.startswith(EVENT_PREFIX) and threat_id[len(EVENT_PREFIX) :].isdigit():
            event = await self.repos.security_events.get_by_id(int(threat_id[len(EVENT_PREFIX) :]))
            if event is None:
                raise NotFoundError("Security event", threat_id)

        if event is not None:
            event.resolved = True
            event.resolved_at = now
            event.resolved_by = self.user.id
            event.resolution = resolution
            await self.repos.security_events.update(event)
            persisted = True

        log_security_event("threat_resolved", "low", threat_id=threat_id, resolved_by=self.user.id)
        logger.info(f"User {self.user.id} resolved threat {threat_id} (persisted={persisted})")
        await self.audit.log(
            "SECURITY_THREAT_RESOLVED",
            "security_threat",
            resource_id=threat_id,
            details={"threat_id": threat_id, "resolution": resolution, "resolved_at": now.isoformat()},
        )
        return ThreatResolveResult(threat_id=threat_id, resolved=True, resolved_at=now, persisted=persisted)

    async def behavioral_risk(self, user_id: int) -> BehavioralRisk:
        """Score one user's activity over the last ``ANALYSIS_DAYS`` days."""
        self.access.require_super_admin()
        if await self.repos.users.get_by_id(user_id) is None:
            raise NotFoundError("User", user_id)

        since = utc_now() - timedelta(days=behavioral.ANALYSIS_DAYS)
        logs = await self.repos.audit_logs.list_since(since, user_id=user_id)
        factors = behavioral.assess_risk_factors([(log.action, log.timestamp) for log in logs])
        score = behavioral.risk_score(factors)
        return BehavioralRisk(
            user_id=user_id,
            analysis_days=behavioral.ANALYSIS_DAYS,
            total_activities=len(logs),
            risk_score=score,
            risk_level=behavioral.risk_level(score),
            risk_factors=[RiskFactorRead.model_validate(f) for f in factors],
            recommendations=behavioral.recommendations(factors),
        )

    @staticmethod
    def _report_from_log(log: AuditLog) -> SecurityReportRead:
        return SecurityReportRead.model_validate({**(log.details or {}), "generated_by": log.user_id})

    @staticmethod
    def _schedule_from_log(log: AuditLog, now: datetime) -> ScheduledReportRead:
        details = log.details or {}
        return ScheduledReportRead.model_validate(
            {
                **details,
                "next_run": next_run(details["frequency"], now, details.get("time")),
                "scheduled_by": log.user_id,
            }
        )

    async def reports_overview(self) -> SecurityReportsOverview:
        """Report catalogue with data point counts, recent and scheduled reports."""
        self.access.require_super_admin()
        now = utc_now()
        logs = await self.repos.audit_logs.list_since(now - REPORT_WINDOW)
        points = report_data_points(logs)
        generated = [log for log in reversed(logs) if log.action == REPORT_GENERATED]
        scheduled = await self.scheduled_reports()
        return SecurityReportsOverview(
            report_types=[
                SecurityReportType(id=kind, name=name, description=description, data_points=points[kind])
                for kind, (name, description) in REPORT_TYPES.items()
            ],
            recent_reports=[self._report_from_log(log) for log in generated[:RECENT_REPORTS]],
            scheduled_reports=scheduled,
            metrics=SecurityReportMetrics(
                generated=len(generated),
                scheduled=sum(1 for log in logs if log.action == REPORT_SCHEDULED),
                exports=sum(1 for log in logs if log.action == "EXPORT"),
                security_rows=points["threat_landscape"],
            ),
            last_updated=now,
        )

    async def generate_report(self, request: SecurityReportRequest) -> SecurityReportRead:
        """Build a report over the requested window and record its generation."""
        metrics = await self.metrics(request.timeframe)
        name, _ = REPORT_TYPES[request.type]
        report = SecurityReportRead(
            report_id=f"RPT-{uuid.uuid4().hex[:12].upper()}",
            report_type=request.type,
            name=name,
            timeframe=request.timeframe,
            format=request.format,
            sections=request.sections,
            generated_at=utc_now(),
            generated_by=self.user.id,
        )
        await self.audit.log(
            REPORT_GENERATED,
            "security_report",
            resource_id=report.report_id,
            details=report.model_dump(mode="json", exclude={"metrics", "generated_by"}),
        )
        logger.info(f"User {self.user.id} generated security report {report.report_id} ({request.type})")
        return report.model_copy(update={"metrics": metrics})

    async def get_report(self, report_id: str) -> SecurityReportRead:
        self.access.require_super_admin()
        query = AuditLogQuery(action=REPORT_GENERATED, resource="security_report", resource_id=report_id)
        rows, _ = await self.repos.audit_logs.search(query, limit=1)
        if not rows:
            raise NotFoundError("Security report", report_id)
        return self._report_from_log(rows[0][0])

    async def schedule_report(self, schedule: SecurityReportSchedule) -> ScheduledReportRead:
        """Record a recurring report; the next run is derived from the frequency."""
        self.access.require_super_admin()
        schedule_id = f"SCH-{uuid.uuid4().hex[:12].upper()}"
        details = {"schedule_id": schedule_id, **schedule.model_dump(mode="json")}
        await self.audit.log(REPORT_SCHEDULED, "scheduled_report", resource_id=schedule_id, details=details)
        logger.info(f"User {self.user.id} scheduled {schedule.frequency} security report {schedule_id}")
        run = next_run(schedule.frequency, utc_now(), schedule.time)
        return ScheduledReportRead.model_validate({**details, "next_run": run, "scheduled_by": self.user.id})

    async def scheduled_reports(self) -> List[ScheduledReportRead]:
        """Schedules recorded in the last 90 days, newest first."""
        self.access.require_super_admin()
        now = utc_now()
        query = AuditLogQuery(action=REPORT_SCHEDULED, date_from=now - SCHEDULE_WINDOW)
        rows, _ = await self.repos.audit_logs.search(query, limit=MAX_SCHEDULES)
        return [self._schedule_from_log(log, now) for log, _ in rows]
