"""Unit tests for the security dashboard, threat resolution and behavioural risk."""

from datetime import datetime
from unittest.mock import patch

import pytest
import pytest_asyncio

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import AuditLog, SecurityEvent
from fnb_cost.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.models.io.security import SecurityReportRequest, SecurityReportSchedule
from fnb_cost.server.services.audit import AuditService, ClientInfo
from fnb_cost.server.services.security import SecurityService, next_run, threat_from_event, window_start

LOG_EVENT = "fnb_cost.server.services.security.log_security_event"


@pytest_asyncio.fixture
async def failed_logins(repos, world):
    """Five failed logins for the clerk, each from a different address."""
    for i in range(5):
        audit = AuditService(repos, None, ClientInfo(ip_address=f"198.51.100.{i}"))
        await audit.log_auth_action("FAILED_LOGIN", world.clerk.id, {"email": world.clerk.email})


@pytest_asyncio.fixture
async def stored_event(repos, world) -> SecurityEvent:
    return await repos.security_events.create(
        SecurityEvent(
            type="suspicious_ip_activity",
            severity="critical",
            description="Credential stuffing from 203.0.113.5",
            ip="203.0.113.5",
            property_id=world.hotel.id,
            event_metadata={"failed_attempts": 40},
        )
    )


class TestHelpers:
    def test_window_start(self):
        now = datetime(2025, 3, 10, 12, 0)
        assert window_start("1h", now) == datetime(2025, 3, 10, 11, 0)
        assert window_start("7d", now) == datetime(2025, 3, 3, 12, 0)

    def test_window_start_rejects_unknown_timeframe(self):
        with pytest.raises(ValidationFailedError):
            window_start("30d", datetime(2025, 3, 10))

    def test_threat_from_event(self):
        event = SecurityEvent(
            id=7,
            type="brute_force_attack",
            severity="high",
            description="x",
            user_id=3,
            timestamp=datetime(2025, 3, 10),
            event_metadata={"failed_attempts": 6},
        )
        threat = threat_from_event(event)
        assert threat.id == "event_7"
        assert threat.level == "high"
        assert threat.persisted is True
        assert threat.details == {"failed_attempts": 6}


class TestDashboard:
    @pytest.mark.asyncio
    async def test_combines_detected_and_stored_threats(self, make_service, world, failed_logins, stored_event):
        service = make_service(SecurityService, world.admin)
        with patch(LOG_EVENT) as log_event:
            dashboard = await service.dashboard("24h")

        by_type = {t.type: t for t in dashboard.threats}
        brute = by_type["brute_force_attack"]
        assert brute.level == "high"
        assert brute.user_id == world.clerk.id
        assert brute.details["failed_attempts"] == 5
        assert brute.id.startswith("audit_threat_")
        assert by_type["suspicious_ip_activity"].id == f"event_{stored_event.id}"

        assert len(dashboard.alerts) == 1
        assert dashboard.alerts[0].alert_level == "warning"
        assert dashboard.summary.total_active == 2
        assert dashboard.summary.critical == 1
        assert dashboard.summary.high == 1
        assert dashboard.summary.last_alert_time == dashboard.alerts[0].sent_at

        log_event.assert_called_once()
        assert log_event.call_args.args == ("brute_force_attack", "high")

    @pytest.mark.asyncio
    async def test_recent_logs_newest_first(self, make_service, world, failed_logins):
        with patch(LOG_EVENT):
            dashboard = await make_service(SecurityService, world.admin).dashboard("1h")

        assert len(dashboard.recent_logs) == 5
        ids = [log.id for log in dashboard.recent_logs]
        assert ids == sorted(ids, reverse=True)
        assert all(log.action == "FAILED_LOGIN" for log in dashboard.recent_logs)

    @pytest.mark.asyncio
    async def test_quiet_window(self, make_service, world):
        with patch(LOG_EVENT) as log_event:
            dashboard = await make_service(SecurityService, world.admin).dashboard()

        assert dashboard.threats == []
        assert dashboard.alerts == []
        assert dashboard.summary.total_active == 0
        assert dashboard.summary.last_alert_time is None
        log_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_metrics(self, make_service, world, failed_logins, stored_event):
        with patch(LOG_EVENT):
            metrics = await make_service(SecurityService, world.admin).metrics("24h")

        assert metrics.total_threats == 2
        assert metrics.threats_by_type == {"brute_force_attack": 1, "suspicious_ip_activity": 1}
        assert metrics.active_threats_by_level["critical"] == 1
        assert metrics.active_threats_by_level["high"] == 1
        assert metrics.top_targeted_users[0].user_id == world.clerk.id
        assert metrics.top_targeted_properties[0].property_id == world.hotel.id
        assert metrics.average_resolution_time == 0

    @pytest.mark.asyncio
    async def test_invalid_timeframe(self, make_service, world):
        with pytest.raises(ValidationFailedError):
            await make_service(SecurityService, world.admin).dashboard("2d")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["owner", "manager", "clerk", "outsider"])
    async def test_super_admin_only(self, make_service, world, who):
        with pytest.raises(PermissionDeniedError):
            await make_service(SecurityService, getattr(world, who)).dashboard()


class TestResolveThreat:
    @pytest.mark.asyncio
    async def test_resolves_stored_event(self, make_service, repos, world, stored_event):
        service = make_service(SecurityService, world.admin)
        with patch(LOG_EVENT):
            result = await service.resolve_threat(f"event_{stored_event.id}", "IP blocked at the firewall")

        assert result.persisted is True
        assert result.resolved is True

        event = await repos.security_events.get_by_id(stored_event.id)
        assert event.resolved is True
        assert event.resolved_by == world.admin.id
        assert event.resolution == "IP blocked at the firewall"

        logs = await repos.audit_logs.list_since(datetime(2000, 1, 1), user_id=world.admin.id)
        assert [log.action for log in logs] == ["SECURITY_THREAT_RESOLVED"]
        assert logs[0].resource_id == f"event_{stored_event.id}"

    @pytest.mark.asyncio
    async def test_resolved_event_leaves_dashboard(self, make_service, world, stored_event):
        service = make_service(SecurityService, world.admin)
        with patch(LOG_EVENT):
            await service.resolve_threat(f"event_{stored_event.id}", "done")
            dashboard = await service.dashboard()

        assert dashboard.threats == []
        assert dashboard.metrics.average_resolution_time == 0

    @pytest.mark.asyncio
    async def test_detected_threat_is_only_audited(self, make_service, repos, world):
        with patch(LOG_EVENT):
            result = await make_service(SecurityService, world.admin).resolve_threat("audit_threat_1", "user confirmed")

        assert result.persisted is False
        logs = await repos.audit_logs.list_since(datetime(2000, 1, 1), user_id=world.admin.id)
        assert logs[0].details["threat_id"] == "audit_threat_1"

    @pytest.mark.asyncio
    async def test_unknown_stored_event(self, make_service, world):
        with patch(LOG_EVENT), pytest.raises(NotFoundError):
            await make_service(SecurityService, world.admin).resolve_threat("event_999", "n/a")

    @pytest.mark.asyncio
    async def test_super_admin_only(self, make_service, world, stored_event):
        with pytest.raises(PermissionDeniedError):
            await make_service(SecurityService, world.owner).resolve_threat(f"event_{stored_event.id}", "n/a")


class TestBehavioralRisk:
    @pytest.mark.asyncio
    async def test_low_risk_user(self, make_service, world, failed_logins):
        risk = await make_service(SecurityService, world.admin).behavioral_risk(world.clerk.id)

        assert risk.user_id == world.clerk.id
        assert risk.analysis_days == 7
        assert risk.total_activities == 5
        assert risk.risk_factors == []
        assert risk.risk_score == 0.0
        assert risk.risk_level == "low"
        assert risk.recommendations == []

    @pytest.mark.asyncio
    async def test_many_failures_raise_risk(self, make_service, repos, world):
        midday = utc_now().replace(hour=12, minute=0, second=0, microsecond=0)
        for _ in range(25):
            await repos.audit_logs.create(
                AuditLog(user_id=world.clerk.id, action="FAILED_LOGIN", resource="auth", timestamp=midday)
            )

        risk = await make_service(SecurityService, world.admin).behavioral_risk(world.clerk.id)

        assert [f.type for f in risk.risk_factors] == ["high_failure_rate"]
        assert risk.risk_factors[0].score == 75.0
        assert risk.risk_score == 75.0
        assert risk.risk_level == "high"
        assert "Investigate authentication issues" in risk.recommendations

    @pytest.mark.asyncio
    async def test_unknown_user(self, make_service, world):
        with pytest.raises(NotFoundError):
            await make_service(SecurityService, world.admin).behavioral_risk(999)

    @pytest.mark.asyncio
    async def test_super_admin_only(self, make_service, world):
        with pytest.raises(PermissionDeniedError):
            await make_service(SecurityService, world.manager).behavioral_risk(world.clerk.id)


class TestNextRun:
    @pytest.mark.parametrize(
        "frequency, at, expected",
        [
            ("daily", None, datetime(2025, 3, 13, 8, 0)),
            ("daily", "18:30", datetime(2025, 3, 12, 18, 30)),
            ("weekly", None, datetime(2025, 3, 17, 10, 0)),
            ("monthly", None, datetime(2025, 4, 1, 12, 0)),
            ("quarterly", None, datetime(2025, 4, 1, 15, 0)),
        ],
    )
    def test_first_run_after_now(self, frequency, at, expected):
        # Wednesday
        now = datetime(2025, 3, 12, 9, 0)
        assert next_run(frequency, now, at) == expected

    def test_weekly_on_monday_before_run_time(self):
        assert next_run("weekly", datetime(2025, 3, 10, 9, 0)) == datetime(2025, 3, 10, 10, 0)

    def test_monthly_rolls_into_next_year(self):
        assert next_run("monthly", datetime(2025, 12, 5, 9, 0)) == datetime(2026, 1, 1, 12, 0)

    def test_exact_run_time_moves_on(self):
        assert next_run("daily", datetime(2025, 3, 12, 8, 0)) == datetime(2025, 3, 13, 8, 0)


class TestSecurityReports:
    @pytest.mark.asyncio
    async def test_generate_records_report(self, make_service, repos, world, failed_logins):
        report = await make_service(SecurityService, world.admin).generate_report(
            SecurityReportRequest(type="incident_analysis", timeframe="24h", sections=["failed_logins"])
        )

        assert report.report_id.startswith("RPT-")
        assert report.name == "Incident Analysis"
        assert report.generated_by == world.admin.id
        assert report.status == "completed"
        assert report.metrics.total_threats == 1

        [log] = await repos.audit_logs.list(filters={"action": "SECURITY_REPORT_GENERATED"})
        assert log.resource == "security_report"
        assert log.resource_id == report.report_id
        assert "metrics" not in log.details

    @pytest.mark.asyncio
    async def test_get_generated_report(self, make_service, world):
        service = make_service(SecurityService, world.admin)
        generated = await service.generate_report(SecurityReportRequest(type="compliance"))

        stored = await service.get_report(generated.report_id)
        assert stored.report_id == generated.report_id
        assert stored.report_type == "compliance"
        assert stored.timeframe == "7d"
        assert stored.generated_by == world.admin.id
        assert stored.metrics is None

    @pytest.mark.asyncio
    async def test_unknown_report(self, make_service, world):
        with pytest.raises(NotFoundError):
            await make_service(SecurityService, world.admin).get_report("RPT-000000000000")

    @pytest.mark.asyncio
    async def test_schedule_and_list(self, make_service, repos, world):
        service = make_service(SecurityService, world.admin)
        scheduled = await service.schedule_report(
            SecurityReportSchedule(
                name="Weekly threats", type="threat_landscape", frequency="weekly", recipients=["sec@example.com"]
            )
        )

        assert scheduled.schedule_id.startswith("SCH-")
        assert scheduled.status == "active"
        assert scheduled.next_run > utc_now()
        assert scheduled.next_run.weekday() == 0
        assert scheduled.scheduled_by == world.admin.id

        [listed] = await service.scheduled_reports()
        assert listed.schedule_id == scheduled.schedule_id
        assert listed.recipients == ["sec@example.com"]
        [log] = await repos.audit_logs.list(filters={"action": "SECURITY_REPORT_SCHEDULED"})
        assert log.resource == "scheduled_report"

    @pytest.mark.asyncio
    async def test_overview_counts_recent_activity(self, make_service, world, failed_logins):
        service = make_service(SecurityService, world.admin)
        generated = await service.generate_report(SecurityReportRequest(type="threat_landscape"))
        await service.schedule_report(SecurityReportSchedule(name="Daily", type="compliance", frequency="daily"))

        overview = await service.reports_overview()

        points = {t.id: t.data_points for t in overview.report_types}
        # Five failed logins plus the generation and schedule rows
        assert points["threat_landscape"] == 7
        assert points["risk_assessment"] == 2
        assert points["incident_analysis"] == 5
        assert points["compliance"] == 0
        assert points["executive_dashboard"] == 7
        assert [r.report_id for r in overview.recent_reports] == [generated.report_id]
        assert len(overview.scheduled_reports) == 1
        assert overview.metrics.generated == 1
        assert overview.metrics.scheduled == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("who", ["owner", "manager"])
    async def test_super_admin_only(self, make_service, world, who):
        service = make_service(SecurityService, getattr(world, who))
        with pytest.raises(PermissionDeniedError):
            await service.reports_overview()
        with pytest.raises(PermissionDeniedError):
            await service.generate_report(SecurityReportRequest(type="compliance"))
        with pytest.raises(PermissionDeniedError):
            await service.schedule_report(SecurityReportSchedule(name="x", type="compliance", frequency="daily"))
