"""
Per-user behavioral risk scoring.

Scores one user's audit activity over a fixed seven-day window against four
threshold rules and folds the triggered factors into a 0-100 risk score.
The activity audit report uses a simpler additive score over its own period.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Sequence, Tuple

ANALYSIS_DAYS = 7

SEVERITY_WEIGHTS = {"low": 0.3, "medium": 0.6, "high": 1.0, "critical": 1.5}


@dataclass
class RiskFactor:
    type: str
    severity: str
    score: float
    description: str
    impact: str
    evidence: Dict[str, Any] = field(default_factory=dict)
    recommendations: List[str] = field(default_factory=list)


def assess_risk_factors(activities: Sequence[Tuple[str, datetime]]) -> List[RiskFactor]:
    """Evaluate the risk rules over ``(action, timestamp)`` pairs."""
    total = len(activities)
    factors: List[RiskFactor] = []

    avg_daily = total / ANALYSIS_DAYS
    if avg_daily > 200:
        factors.append(
            RiskFactor(
                type="high_activity_volume",
                severity="medium",
                score=min(100.0, avg_daily / 2),
                description=f"High activity volume: {avg_daily:.0f} actions/day",
                impact="Potential automation or excessive system usage",
                evidence={"average_daily": avg_daily, "total": total},
                recommendations=["Verify legitimate business need", "Check for automation"],
            )
        )

    after_hours = sum(1 for _, moment in activities if moment.hour < 6 or moment.hour > 22)
    if after_hours > 10:
        factors.append(
            RiskFactor(
                type="after_hours_access",
                severity="medium",
                score=min(100.0, after_hours * 5),
                description=f"{after_hours} after-hours access events",
                impact="Potential unauthorized access or policy violation",
                evidence={"after_hours_count": after_hours, "percentage": after_hours / total * 100},
                recommendations=["Verify work authorization", "Review access policies"],
            )
        )

    failed = sum(1 for action, _ in activities if "FAILED" in action or "DENIED" in action)
    if failed > 20:
        factors.append(
            RiskFactor(
                type="high_failure_rate",
                severity="high",
                score=min(100.0, failed * 3),
                description=f"{failed} failed/denied actions",
                impact="Potential brute force attack or permission issues",
                evidence={"failed_actions": failed, "failure_rate": failed / total * 100},
                recommendations=["Investigate authentication issues", "Review permissions"],
            )
        )

    exports = sum(1 for action, _ in activities if "EXPORT" in action or "DOWNLOAD" in action)
    if exports > 30:
        factors.append(
            RiskFactor(
                type="excessive_data_export",
                severity="high",
                score=min(100.0, exports * 2),
                description=f"{exports} data export/download actions",
                impact="Potential data exfiltration or policy violation",
                evidence={"export_actions": exports, "percentage": exports / total * 100},
                recommendations=["Verify data export authorization", "Monitor data usage"],
            )
        )

    return factors


def risk_score(factors: Sequence[RiskFactor]) -> float:
    """Severity-weighted mean of factor scores, capped at 100."""
    if not factors:
        return 0.0
    weighted = sum(f.score * SEVERITY_WEIGHTS[f.severity] for f in factors)
    return min(100.0, weighted / len(factors))


def risk_level(score: float) -> str:
    if score >= 90:
        return "critical"
    if score >= 70:
        return "high"
    if score >= 40:
        return "medium"
    return "low"


def recommendations(factors: Sequence[RiskFactor]) -> List[str]:
    """Unique recommendations across factors, first occurrence order."""
    seen: Dict[str, None] = {}
    for factor in factors:
        for item in factor.recommendations:
            seen.setdefault(item, None)
    return list(seen)


ADMIN_RESOURCES = frozenset({"user", "property"})


@dataclass
class ActivityProfile:
    """One user's audit activity over a report period."""

    total_actions: int
    period_days: int
    busiest_day_actions: int
    unique_ips: int
    failed_logins: int
    admin_actions: int
    is_super_admin: bool


def is_admin_action(action: str, resource: str) -> bool:
    return "DELETE" in action or "ADMIN" in action or resource in ADMIN_RESOURCES


def activity_risk(profile: ActivityProfile) -> Tuple[float, List[str]]:
    """Additive 0-100 risk score and the unusual patterns that raised it.

    A day is unusually busy when it holds more than ten times the user's
    average daily actions over the period.
    """
    score = 0.0
    unusual: List[str] = []
    daily_average = profile.total_actions / profile.period_days if profile.period_days else 0.0
    if daily_average and profile.busiest_day_actions > daily_average * 10:
        score += 20
        unusual.append("Unusually high activity volume")
    if profile.unique_ips > 3:
        score += 15
        unusual.append(f"Multiple IP addresses ({profile.unique_ips})")
    if profile.failed_logins > 5:
        score += 25
        unusual.append(f"Multiple failed logins ({profile.failed_logins})")
    if profile.admin_actions and not profile.is_super_admin:
        score += 30
        unusual.append("Administrative actions by non-admin user")
    return min(score, 100.0), unusual


def activity_trend(first_half: int, second_half: int) -> str:
    """Compare action counts of the two halves of a period (20% tolerance)."""
    if second_half > first_half * 1.2:
        return "Increasing"
    if second_half < first_half * 0.8:
        return "Decreasing"
    return "Stable"


def activity_risk_level(score: float) -> str:
    if score > 70:
        return "High"
    if score > 40:
        return "Medium"
    return "Low"
