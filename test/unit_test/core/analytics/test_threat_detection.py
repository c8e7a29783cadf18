"""Unit tests for rule-based threat detection."""

from collections import Counter
from datetime import datetime

import pytest

from fnb_cost.core.analytics.threat_detection import (
    SecurityLogRow,
    Threat,
    ThreatDetector,
    brute_force_action,
    brute_force_level,
    build_alerts,
    compute_metrics,
    ip_activity_level,
    is_off_hours,
    is_security_action,
)

NOW = datetime(2025, 3, 10, 12, 0, 0)


def failed(user_id, ip="10.0.0.1", hour=12):
    return SecurityLogRow(action="FAILED_LOGIN", timestamp=NOW.replace(hour=hour), user_id=user_id, ip_address=ip)


def login(user_id, ip="10.0.0.1", hour=12, minute=0):
    return SecurityLogRow(
        action="LOGIN", timestamp=NOW.replace(hour=hour, minute=minute), user_id=user_id, ip_address=ip
    )


@pytest.fixture
def detector():
    return ThreatDetector("24h", now=NOW)


class TestSecurityActions:
    @pytest.mark.parametrize(
        "action",
        ["LOGIN", "LOGOUT", "FAILED_LOGIN", "PERMISSION_DENIED", "UNAUTHORIZED_ACCESS", "SECURITY_THREAT_RESOLVED"],
    )
    def test_security_actions(self, action):
        assert is_security_action(action) is True

    @pytest.mark.parametrize("action", ["CREATE", "UPDATE", "DELETE", "EXPORT"])
    def test_data_actions_are_not_security_actions(self, action):
        assert is_security_action(action) is False

    def test_ip_falls_back_to_details_then_unknown(self):
        assert SecurityLogRow("LOGIN", NOW, details={"ip": "1.2.3.4"}).ip == "1.2.3.4"
        assert SecurityLogRow("LOGIN", NOW).ip == "unknown"

    @pytest.mark.parametrize("hour, expected", [(5, True), (6, False), (22, False), (23, True)])
    def test_off_hours(self, hour, expected):
        assert is_off_hours(NOW.replace(hour=hour)) is expected


class TestLevels:
    @pytest.mark.parametrize("count, level", [(3, "medium"), (5, "high"), (9, "high"), (10, "critical")])
    def test_brute_force_level(self, count, level):
        assert brute_force_level(count) == level

    @pytest.mark.parametrize("count, level", [(5, "medium"), (10, "high"), (20, "critical")])
    def test_ip_activity_level(self, count, level):
        assert ip_activity_level(count) == level

    def test_brute_force_action(self):
        assert brute_force_action(10) == "Lock account immediately"
        assert brute_force_action(3) == "Monitor for additional attempts"


class TestThreatDetector:
    def test_timeframe_label(self):
        assert ThreatDetector("1h", now=NOW).timeframe_label == "Last Hour"
        assert ThreatDetector("bogus", now=NOW).timeframe_label == "Last 7 Days"

    def test_no_rows_no_threats(self, detector):
        assert detector.detect([]) == []

    def test_failures_below_threshold_are_ignored(self, detector):
        assert detector.detect([failed(7), failed(7)]) == []

    def test_brute_force(self, detector):
        threats = detector.detect([failed(7)] * 3)

        assert len(threats) == 1
        threat = threats[0]
        assert threat.id == "audit_threat_1"
        assert threat.type == "brute_force_attack"
        assert threat.level == "medium"
        assert threat.user_id == 7
        assert threat.details["failed_attempts"] == 3
        assert threat.details["timeframe"] == "Last 24 Hours"
        assert threat.details["recommended_action"] == "Monitor for additional attempts"

    def test_suspicious_ip(self, detector):
        rows = [failed(user_id, ip="203.0.113.9") for user_id in range(1, 6)]

        threats = detector.detect(rows)

        assert [t.type for t in threats] == ["suspicious_ip_activity"]
        assert threats[0].ip == "203.0.113.9"
        assert threats[0].level == "medium"
        assert threats[0].id == "ip_threat_1"

    def test_failures_without_user_do_not_count_towards_ip(self, detector):
        rows = [SecurityLogRow("FAILED_LOGIN", NOW, ip_address="203.0.113.9") for _ in range(6)]
        assert detector.detect(rows) == []

    def test_off_hours_login(self, detector):
        threats = detector.detect([login(3, hour=23, minute=30), login(3, hour=10)])

        assert len(threats) == 1
        assert threats[0].type == "unusual_activity_pattern"
        assert threats[0].level == "low"
        assert threats[0].details["off_hours_count"] == 1
        assert threats[0].details["last_off_hours_access"] == NOW.replace(hour=23, minute=30).isoformat()

    def test_repeated_off_hours_logins_raise_medium(self, detector):
        threats = detector.detect([login(3, hour=2), login(3, hour=3), login(3, hour=4)])
        assert threats[0].level == "medium"

    def test_multiple_devices(self, detector):
        rows = [login(4, ip=f"10.0.0.{i}") for i in range(1, 6)]

        threats = detector.detect(rows)

        assert [t.type for t in threats] == ["multiple_device_access"]
        assert threats[0].level == "medium"
        assert threats[0].details["ip_count"] == 5
        assert threats[0].details["unique_ips"] == sorted(f"10.0.0.{i}" for i in range(1, 6))

    def test_two_devices_is_fine(self, detector):
        assert detector.detect([login(4, ip="10.0.0.1"), login(4, ip="10.0.0.2")]) == []

    def test_known_unresolved_threat_suppresses_duplicate(self, detector):
        known = [Threat(id="event_1", level="high", type="brute_force_attack", description="", timestamp=NOW, user_id=7)]
        assert detector.detect([failed(7)] * 4, known) == []

    def test_resolved_threat_does_not_suppress(self, detector):
        known = [
            Threat(
                id="event_1",
                level="high",
                type="brute_force_attack",
                description="",
                timestamp=NOW,
                user_id=7,
                resolved=True,
            )
        ]
        assert len(detector.detect([failed(7)] * 4, known)) == 1


class TestAlertsAndMetrics:
    def _threat(self, threat_id, level, **kwargs):
        return Threat(
            id=threat_id,
            level=level,
            type=kwargs.pop("type", "brute_force_attack"),
            description=f"threat {threat_id}",
            timestamp=NOW,
            **kwargs,
        )

    def test_alerts_only_for_new_high_and_critical(self):
        threats = [
            self._threat("a", "high", details={"recommended_action": "Call user"}),
            self._threat("b", "critical"),
            self._threat("c", "medium"),
            self._threat("d", "critical", persisted=True),
        ]

        alerts = build_alerts(threats, NOW)

        assert [a.id for a in alerts] == ["alert_a", "alert_b"]
        assert alerts[0].alert_level == "warning"
        assert alerts[0].action_required == "Call user"
        assert alerts[1].alert_level == "critical"
        assert alerts[1].action_required == "Review threat details"

    def test_compute_metrics(self):
        threats = [
            self._threat("a", "high", user_id=1, property_id=9),
            self._threat("b", "low", user_id=2, type="unusual_activity_pattern"),
            self._threat("c", "critical", user_id=1, resolved=True),
        ]

        metrics = compute_metrics(threats, Counter({2: 4}), [2.0, 3.0])

        assert metrics["total_threats"] == 3
        assert metrics["active_threats_by_level"] == {"low": 1, "medium": 0, "high": 1, "critical": 0}
        assert metrics["threats_by_type"] == {"brute_force_attack": 2, "unusual_activity_pattern": 1}
        assert metrics["top_targeted_users"] == [
            {"user_id": 2, "threat_count": 5},
            {"user_id": 1, "threat_count": 2},
        ]
        assert metrics["top_targeted_properties"] == [{"property_id": 9, "threat_count": 1}]
        assert metrics["average_resolution_time"] == 2

    def test_compute_metrics_without_resolutions(self):
        assert compute_metrics([], Counter(), [])["average_resolution_time"] == 0
