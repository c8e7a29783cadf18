"""
Audit log I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: Optional[str] = None
    email: str


class AuditLogRead(BaseModel):
    """Schema for reading an audit log row together with its acting user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    property_id: Optional[int] = None
    action: str
    resource: str
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    timestamp: datetime
    user: Optional[AuditUser] = None


class AuditLogFilters(BaseModel):
    """Query filters shared by listing and export."""

    user_id: Optional[int] = None
    property_id: Optional[int] = None
    resource: Optional[str] = None
    action: Optional[str] = None
    include_actions: List[str] = Field(default_factory=list)
    exclude_actions: List[str] = Field(default_factory=list)
    date_from: Optional[date] = None
    date_to: Optional[date] = Field(default=None, description="Inclusive; covers the whole day")
    search_term: Optional[str] = None


class AuditLogPage(BaseModel):
    logs: List[AuditLogRead]
    total: int
    page: int
    limit: int
    total_pages: int


class ActionCount(BaseModel):
    action: str
    count: int


class ResourceCount(BaseModel):
    resource: str
    count: int


class AuditLogStats(BaseModel):
    total_logs: int
    today_logs: int
    unique_users: int
    top_actions: List[ActionCount]
    top_resources: List[ResourceCount]


class AuditCleanupResult(BaseModel):
    deleted_count: int


class ShareCount(BaseModel):
    name: str
    count: int
    percentage: float


class PropertyActivity(BaseModel):
    property_id: int
    property_name: str
    action_count: int


class ActivitySample(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    resource: str
    resource_id: Optional[str] = None
    timestamp: datetime
    ip_address: Optional[str] = None


class UserActivity(BaseModel):
    user_id: int
    user_name: str
    user_email: str
    user_role: str
    last_active: datetime
    total_actions: int
    daily_average: float
    total_logins: int
    last_login: Optional[datetime] = None
    unique_login_days: int
    failed_logins: int
    unique_ips: int
    action_breakdown: List[ShareCount]
    resource_breakdown: List[ShareCount]
    property_activity: List[PropertyActivity]
    recent_activity: List[ActivitySample]
    risk_score: float = Field(ge=0, le=100)
    activity_trend: str
    unusual_activity: List[str]


class DailyActivity(BaseModel):
    date: date
    total_actions: int
    unique_users: int
    average_actions_per_user: float


class ActionActivity(BaseModel):
    action: str
    count: int
    percentage: float
    unique_users: int


class ResourceActivity(BaseModel):
    resource: str
    count: int
    percentage: float
    unique_users: int
    top_users: List[str]


class LoginAnalytics(BaseModel):
    total_logins: int
    unique_login_users: int
    login_failures: int
    peak_login_hour: Optional[int] = Field(default=None, description="UTC hour with the most logins")


class SuspiciousActivity(BaseModel):
    user_id: int
    user_name: str
    activity: str
    timestamp: datetime
    risk_level: str


class ActivityRiskAssessment(BaseModel):
    overall_risk_score: float
    high_risk_users: List[str]
    suspicious_activities: List[SuspiciousActivity]
    recommendations: List[str]


class UserActivitySummary(BaseModel):
    total_users: int
    active_users: int
    total_actions: int
    unique_resources: int
    average_actions_per_user: float
    peak_day: Optional[DailyActivity] = None
    most_active_user: Optional[str] = None
    top_action: Optional[ShareCount] = None


class UserActivityReport(BaseModel):
    report_title: str
    date_from: date
    date_to: date
    property_id: Optional[int] = None
    summary: UserActivitySummary
    users: List[UserActivity]
    daily_activity: List[DailyActivity]
    actions: List[ActionActivity]
    resources: List[ResourceActivity]
    login_analytics: LoginAnalytics
    risk_assessment: ActivityRiskAssessment
