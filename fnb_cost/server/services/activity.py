"""
User activity audit report.

Summarises who did what over a date range from the audit trail: per-user
activity and risk, daily volume, action and resource analytics and login
figures. Super admins see every row; property admins see the rows of their
properties plus rows with no property.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from fnb_cost.core.analytics.behavioral import (
    ActivityProfile,
    activity_risk,
    activity_risk_level,
    activity_trend,
    is_admin_action,
)
from fnb_cost.core.database.entities import AuditLog, Property, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import UserRole
from fnb_cost.core.models.io.audit_logs import (
    ActionActivity,
    ActivityRiskAssessment,
    ActivitySample,
    DailyActivity,
    LoginAnalytics,
    PropertyActivity,
    ResourceActivity,
    ShareCount,
    SuspiciousActivity,
    UserActivity,
    UserActivityReport,
    UserActivitySummary,
)

from .access import AccessControl
from .audit import AuditService

logger = get_logger(__name__)

RECENT_SAMPLE = 10
HIGH_RISK_SCORE = 50
FAILURE_ALERT_COUNT = 10


def _shares(counts: Counter, total: int) -> List[ShareCount]:
    return [
        ShareCount(name=name, count=count, percentage=count / total * 100 if total else 0.0)
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def _display_name(user: User) -> str:
    return user.name or user.email


class ActivityReportService:
    """Builds the user activity audit report for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _scope(self, property_id: Optional[int]) -> Tuple[Optional[Sequence[int]], Optional[Property]]:
        self.access.require_role(UserRole.super_admin, UserRole.property_admin)
        visible = await self.access.accessible_property_ids()
        if visible is not None and not visible:
            raise PermissionDeniedError("No property access found for user")
        if property_id is None:
            return visible, None
        await self.access.require_property(property_id)
        selected = await self.repos.properties.get_by_id(property_id)
        if selected is None:
            raise NotFoundError("Property", property_id)
        return visible, selected

    async def user_activity_report(
        self, start: date, end: date, *, property_id: Optional[int] = None
    ) -> UserActivityReport:
        """Activity of every user with audit rows between ``start`` and ``end`` (whole days).

        Args:
            start: First day
            end: Last day, inclusive
            property_id: Only rows recorded against this property

        Returns:
            The report; rows without a user count towards totals but not towards users
        """
        if start > end:
            raise ValidationFailedError("start date must not be after end date")
        visible, selected = await self._scope(property_id)
        date_from = datetime.combine(start, time.min)
        date_to = datetime.combine(end, time.max)
        rows = await self.repos.audit_logs.list_between(
            date_from, date_to, property_id=property_id, property_ids=visible
        )
        logs = [log for log, _ in rows]
        period_days = (end - start).days + 1

        by_user: Dict[int, List[AuditLog]] = defaultdict(list)
        users: Dict[int, User] = {}
        for log, user in rows:
            if user is not None:
                by_user[user.id].append(log)
                users[user.id] = user
        property_ids = sorted({log.property_id for log in logs if log.property_id is not None})
        property_names = {p.id: p.name for p in await self.repos.properties.search(property_ids=property_ids)}

        midpoint = date_from + timedelta(days=period_days / 2)
        activity = [
            self._user_activity(users[uid], by_user[uid], period_days, midpoint, property_names) for uid in by_user
        ]
        activity.sort(key=lambda a: (-a.total_actions, a.user_name))

        daily = self._daily_activity(logs, start, end)
        actions = self._action_activity(logs)
        total = len(logs)
        top_actions = _shares(Counter(log.action for log in logs), total)
        logins = [log for log in logs if log.action == "LOGIN"]
        login_hours = Counter(log.timestamp.hour for log in logins)
        login_analytics = LoginAnalytics(
            total_logins=len(logins),
            unique_login_users=len({log.user_id for log in logins}),
            login_failures=sum(1 for log in logs if log.action == "FAILED_LOGIN"),
            peak_login_hour=min(login_hours, key=lambda h: (-login_hours[h], h)) if login_hours else None,
        )
        busiest = max(daily, key=lambda d: d.total_actions)

        logger.info(
            f"User activity report for user {self.user.id}: {total} rows, {len(activity)} users, "
            f"{start} to {end}"
        )
        return UserActivityReport(
            report_title=(
                f"User Activity & Audit Report - {selected.name}" if selected else "User Activity & Audit Report"
            ),
            date_from=start,
            date_to=end,
            property_id=property_id,
            summary=UserActivitySummary(
                total_users=len(activity),
                active_users=sum(1 for a in activity if a.total_actions),
                total_actions=total,
                unique_resources=len({log.resource for log in logs}),
                average_actions_per_user=total / len(activity) if activity else 0.0,
                peak_day=busiest if busiest.total_actions else None,
                most_active_user=activity[0].user_name if activity else None,
                top_action=top_actions[0] if top_actions else None,
            ),
            users=activity,
            daily_activity=daily,
            actions=actions,
            resources=self._resource_activity(rows),
            login_analytics=login_analytics,
            risk_assessment=self._risk_assessment(activity, login_analytics),
        )

    @staticmethod
    def _user_activity(
        user: User, logs: List[AuditLog], period_days: int, midpoint: datetime, property_names: Dict[int, str]
    ) -> UserActivity:
        total = len(logs)
        logins = [log for log in logs if log.action == "LOGIN"]
        ips = {log.ip_address for log in logs if log.ip_address}
        per_day = Counter(log.timestamp.date() for log in logs)
        failed = sum(1 for log in logs if log.action == "FAILED_LOGIN")
        score, unusual = activity_risk(
            ActivityProfile(
                total_actions=total,
                period_days=period_days,
                busiest_day_actions=max(per_day.values()),
                unique_ips=len(ips),
                failed_logins=failed,
                admin_actions=sum(1 for log in logs if is_admin_action(log.action, log.resource)),
                is_super_admin=user.role == UserRole.super_admin.value,
            )
        )
        first_half = sum(1 for log in logs if log.timestamp <= midpoint)
        property_counts = Counter(log.property_id for log in logs if log.property_id is not None)

        return UserActivity(
            user_id=user.id,
            user_name=user.name or "Unknown",
            user_email=user.email,
            user_role=user.role,
            last_active=logs[0].timestamp,
            total_actions=total,
            daily_average=total / period_days,
            total_logins=len(logins),
            last_login=logins[0].timestamp if logins else None,
            unique_login_days=len({log.timestamp.date() for log in logins}),
            failed_logins=failed,
            unique_ips=len(ips),
            action_breakdown=_shares(Counter(log.action for log in logs), total),
            resource_breakdown=_shares(Counter(log.resource for log in logs), total),
            property_activity=[
                PropertyActivity(
                    property_id=pid, property_name=property_names.get(pid, "Unknown"), action_count=count
                )
                for pid, count in property_counts.most_common()
            ],
            recent_activity=[ActivitySample.model_validate(log) for log in logs[:RECENT_SAMPLE]],
            risk_score=score,
            activity_trend=activity_trend(first_half, total - first_half),
            unusual_activity=unusual,
        )

    @staticmethod
    def _daily_activity(logs: List[AuditLog], start: date, end: date) -> List[DailyActivity]:
        actions: Counter = Counter()
        day_users: Dict[date, set] = defaultdict(set)
        for log in logs:
            day = log.timestamp.date()
            actions[day] += 1
            if log.user_id is not None:
                day_users[day].add(log.user_id)

        daily = []
        day = start
        while day <= end:
            unique = len(day_users[day])
            daily.append(
                DailyActivity(
                    date=day,
                    total_actions=actions[day],
                    unique_users=unique,
                    average_actions_per_user=actions[day] / unique if unique else 0.0,
                )
            )
            day += timedelta(days=1)
        return daily

    @staticmethod
    def _action_activity(logs: List[AuditLog]) -> List[ActionActivity]:
        counts = Counter(log.action for log in logs)
        users: Dict[str, set] = defaultdict(set)
        for log in logs:
            if log.user_id is not None:
                users[log.action].add(log.user_id)
        return [
            ActionActivity(action=s.name, count=s.count, percentage=s.percentage, unique_users=len(users[s.name]))
            for s in _shares(counts, len(logs))
        ]

    @staticmethod
    def _resource_activity(rows: List[Tuple[AuditLog, Optional[User]]]) -> List[ResourceActivity]:
        counts: Counter = Counter()
        users: Dict[str, set] = defaultdict(set)
        actors: Dict[str, Counter] = defaultdict(Counter)
        for log, user in rows:
            counts[log.resource] += 1
            if user is not None:
                users[log.resource].add(user.id)
                actors[log.resource][_display_name(user)] += 1
        return [
            ResourceActivity(
                resource=s.name,
                count=s.count,
                percentage=s.percentage,
                unique_users=len(users[s.name]),
                top_users=[name for name, _ in actors[s.name].most_common(3)],
            )
            for s in _shares(counts, len(rows))
        ]

    @staticmethod
    def _risk_assessment(activity: List[UserActivity], logins: LoginAnalytics) -> ActivityRiskAssessment:
        high_risk = [a.user_name for a in activity if a.risk_score > HIGH_RISK_SCORE]
        suspicious = [
            SuspiciousActivity(
                user_id=a.user_id,
                user_name=a.user_name,
                activity=pattern,
                timestamp=a.last_active,
                risk_level=activity_risk_level(a.risk_score),
            )
            for a in activity
            for pattern in a.unusual_activity
        ]
        recommendations = []
        if high_risk:
            recommendations.append(f"Review activity for {len(high_risk)} high-risk users: {', '.join(high_risk[:3])}")
        if suspicious:
            recommendations.append(f"Investigate {len(suspicious)} suspicious activity patterns")
        if logins.login_failures > FAILURE_ALERT_COUNT:
            recommendations.append("High number of login failures; consider stricter lockout thresholds")
        return ActivityRiskAssessment(
            overall_risk_score=sum(a.risk_score for a in activity) / len(activity) if activity else 0.0,
            high_risk_users=high_risk,
            suspicious_activities=suspicious,
            recommendations=recommendations,
        )
