"""
Rule-based threat detection over security audit rows.

The detector works on already-loaded rows and holds no state between calls.
Four rules are applied:

- brute_force_attack: repeated FAILED_LOGIN for one user
- suspicious_ip_activity: repeated FAILED_LOGIN from one IP
- unusual_activity_pattern: LOGIN outside 06:00-22:59
- multiple_device_access: LOGIN from several distinct IPs for one user

Threats that are already persisted (unresolved ``SecurityEvent`` rows) are
passed in and suppress a detected duplicate of the same type and subject.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

SECURITY_ACTION_MARKERS = ("SECURITY", "LOGIN", "LOGOUT")
SECURITY_EXACT_ACTIONS = frozenset({"UNAUTHORIZED_ACCESS", "PERMISSION_DENIED", "FAILED_LOGIN"})

TIMEFRAME_LABELS = {"1h": "Last Hour", "24h": "Last 24 Hours", "7d": "Last 7 Days"}

THREAT_LEVELS = ("low", "medium", "high", "critical")


@dataclass
class SecurityLogRow:
    """Minimal view of an audit row used by the detector."""

    action: str
    timestamp: datetime
    user_id: Optional[int] = None
    ip_address: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ip(self) -> str:
        return self.ip_address or (self.details or {}).get("ip") or "unknown"


@dataclass
class Threat:
    id: str
    level: str
    type: str
    description: str
    timestamp: datetime
    user_id: Optional[int] = None
    property_id: Optional[int] = None
    ip: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    persisted: bool = False


@dataclass
class Alert:
    id: str
    alert_level: str
    message: str
    sent_at: datetime
    action_required: str


def is_security_action(action: str) -> bool:
    """Whether an audit action belongs to the security log view."""
    return action in SECURITY_EXACT_ACTIONS or any(marker in action for marker in SECURITY_ACTION_MARKERS)


def brute_force_level(count: int) -> str:
    if count >= 10:
        return "critical"
    if count >= 5:
        return "high"
    return "medium"


def brute_force_action(count: int) -> str:
    if count >= 10:
        return "Lock account immediately"
    if count >= 5:
        return "Contact user to verify activity"
    return "Monitor for additional attempts"


def ip_activity_level(count: int) -> str:
    if count >= 20:
        return "critical"
    if count >= 10:
        return "high"
    return "medium"


def ip_activity_action(count: int) -> str:
    if count >= 20:
        return "Block IP immediately"
    if count >= 10:
        return "Apply rate limiting to IP"
    return "Monitor for escalation"


def is_off_hours(moment: datetime) -> bool:
    return moment.hour < 6 or moment.hour > 22


class ThreatDetector:
    """Apply the detection rules to one window of security rows.

    Args:
        timeframe: Window key (``1h``, ``24h`` or ``7d``) used in threat details
        failed_login_threshold: FAILED_LOGIN count per user that raises a threat
        ip_failure_threshold: FAILED_LOGIN count per IP that raises a threat
        now: Timestamp stamped on detected threats
    """

    def __init__(
        self,
        timeframe: str,
        *,
        failed_login_threshold: int = 3,
        ip_failure_threshold: int = 5,
        now: datetime,
    ) -> None:
        self.timeframe = timeframe
        self.timeframe_label = TIMEFRAME_LABELS.get(timeframe, TIMEFRAME_LABELS["7d"])
        self.failed_login_threshold = failed_login_threshold
        self.ip_failure_threshold = ip_failure_threshold
        self.now = now
        self._counter = 0

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}_{self._counter}"

    @staticmethod
    def _already_known(known: Sequence[Threat], threat_type: str, *, user_id=None, ip=None) -> bool:
        for item in known:
            if item.type != threat_type or item.resolved:
                continue
            if user_id is not None and item.user_id == user_id:
                return True
            if ip is not None and item.ip == ip:
                return True
        return False

    def failed_logins_by_user(self, rows: Iterable[SecurityLogRow]) -> Counter:
        return Counter(row.user_id for row in rows if row.action == "FAILED_LOGIN" and row.user_id is not None)

    def detect(self, rows: Sequence[SecurityLogRow], known: Sequence[Threat] = ()) -> List[Threat]:
        """Run every rule and return newly detected threats.

        Args:
            rows: Security audit rows in the window
            known: Persisted, unresolved threats used for de-duplication

        Returns:
            Detected threats, in rule order
        """
        threats: List[Threat] = []
        failures_by_user = self.failed_logins_by_user(rows)
        failures_by_ip: Counter = Counter(
            row.ip for row in rows if row.action == "FAILED_LOGIN" and row.user_id is not None
        )

        for user_id, count in failures_by_user.items():
            if count < self.failed_login_threshold:
                continue
            if self._already_known(known, "brute_force_attack", user_id=user_id):
                continue
            threats.append(
                Threat(
                    id=self._next_id("audit_threat"),
                    level=brute_force_level(count),
                    type="brute_force_attack",
                    description=f"Multiple failed login attempts detected for user {user_id}",
                    timestamp=self.now,
                    user_id=user_id,
                    details={
                        "failed_attempts": count,
                        "timeframe": self.timeframe_label,
                        "recommended_action": brute_force_action(count),
                    },
                )
            )

        for ip, count in failures_by_ip.items():
            if count < self.ip_failure_threshold:
                continue
            if self._already_known(known, "suspicious_ip_activity", ip=ip):
                continue
            threats.append(
                Threat(
                    id=self._next_id("ip_threat"),
                    level=ip_activity_level(count),
                    type="suspicious_ip_activity",
                    description=f"Multiple failed login attempts from IP address {ip}",
                    timestamp=self.now,
                    ip=ip,
                    details={
                        "ip": ip,
                        "failed_attempts": count,
                        "timeframe": self.timeframe_label,
                        "recommended_action": ip_activity_action(count),
                    },
                )
            )

        logins: Dict[int, List[SecurityLogRow]] = defaultdict(list)
        for row in rows:
            if row.action == "LOGIN" and row.user_id is not None:
                logins[row.user_id].append(row)

        for user_id, user_logins in logins.items():
            off_hours = [row for row in user_logins if is_off_hours(row.timestamp)]
            if off_hours and not self._already_known(known, "unusual_activity_pattern", user_id=user_id):
                latest = max(row.timestamp for row in off_hours)
                threats.append(
                    Threat(
                        id=self._next_id("time_threat"),
                        level="medium" if len(off_hours) >= 3 else "low",
                        type="unusual_activity_pattern",
                        description="User accessing system outside normal business hours",
                        timestamp=self.now,
                        user_id=user_id,
                        details={
                            "off_hours_count": len(off_hours),
                            "last_off_hours_access": latest.isoformat(),
                            "normal_hours": "6:00 AM - 10:00 PM",
                            "timeframe": self.timeframe_label,
                            "recommended_action": "Verify with user if access was authorized",
                        },
                    )
                )

            ips = sorted({row.ip for row in user_logins})
            if len(ips) >= 3 and not self._already_known(known, "multiple_device_access", user_id=user_id):
                threats.append(
                    Threat(
                        id=self._next_id("multi_ip_threat"),
                        level="medium" if len(ips) >= 5 else "low",
                        type="multiple_device_access",
                        description=f"User accessed from {len(ips)} different IP addresses",
                        timestamp=self.now,
                        user_id=user_id,
                        details={
                            "ip_count": len(ips),
                            "unique_ips": ips[:5],
                            "timeframe": self.timeframe_label,
                            "recommended_action": "Verify all access locations with user",
                        },
                    )
                )

        return threats


def build_alerts(threats: Iterable[Threat], now: datetime) -> List[Alert]:
    """Raise an alert for every detected high or critical threat."""
    alerts: List[Alert] = []
    for threat in threats:
        if threat.persisted or threat.level not in ("high", "critical"):
            continue
        alerts.append(
            Alert(
                id=f"alert_{threat.id}",
                alert_level="critical" if threat.level == "critical" else "warning",
                message=threat.description,
                sent_at=now,
                action_required=threat.details.get("recommended_action", "Review threat details"),
            )
        )
    return alerts


def _top(counts: Counter, key: str, limit: int = 5) -> List[Dict[str, int]]:
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [{key: subject, "threat_count": count} for subject, count in ordered[:limit]]


def compute_metrics(
    threats: Sequence[Threat],
    failures_by_user: Counter,
    resolution_hours: Sequence[float],
) -> Dict[str, Any]:
    """Aggregate a threat list into dashboard metrics.

    Args:
        threats: All threats in the window (persisted and detected)
        failures_by_user: FAILED_LOGIN counts per user in the window
        resolution_hours: Time to resolve, in hours, of every resolved threat

    Returns:
        Dict with total_threats, active_threats_by_level, threats_by_type,
        top_targeted_users, top_targeted_properties and average_resolution_time
    """
    active = [t for t in threats if not t.resolved]
    by_level = {level: sum(1 for t in active if t.level == level) for level in THREAT_LEVELS}
    by_type = dict(Counter(t.type for t in threats))

    user_counts: Counter = Counter(failures_by_user)
    user_counts.update(t.user_id for t in threats if t.user_id is not None)
    property_counts: Counter = Counter(t.property_id for t in threats if t.property_id is not None)

    average = round(sum(resolution_hours) / len(resolution_hours)) if resolution_hours else 0

    return {
        "total_threats": len(threats),
        "active_threats_by_level": by_level,
        "threats_by_type": by_type,
        "top_targeted_users": _top(user_counts, "user_id"),
        "top_targeted_properties": _top(property_counts, "property_id"),
        "average_resolution_time": average,
    }
