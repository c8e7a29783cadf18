"""
Security analytics I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ThreatRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    level: str
    type: str
    description: str
    timestamp: datetime
    user_id: Optional[int] = None
    property_id: Optional[int] = None
    ip: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[int] = None


class AlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    alert_level: str
    message: str
    sent_at: datetime
    action_required: str


class TargetedUser(BaseModel):
    user_id: int
    threat_count: int


class TargetedProperty(BaseModel):
    property_id: int
    threat_count: int


class SecurityMetrics(BaseModel):
    total_threats: int
    active_threats_by_level: Dict[str, int]
    threats_by_type: Dict[str, int]
    top_targeted_users: List[TargetedUser]
    top_targeted_properties: List[TargetedProperty]
    average_resolution_time: int = Field(description="Mean hours from detection to resolution")


class SecuritySummary(BaseModel):
    total_active: int
    critical: int
    high: int
    last_alert_time: Optional[datetime] = None


class SecurityLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    property_id: Optional[int] = None
    action: str
    resource: str
    ip_address: Optional[str] = None
    timestamp: datetime


class SecurityDashboard(BaseModel):
    timeframe: str
    threats: List[ThreatRead]
    alerts: List[AlertRead]
    metrics: SecurityMetrics
    summary: SecuritySummary
    recent_logs: List[SecurityLogRead]


class ThreatResolve(BaseModel):
    resolution: str = Field(min_length=1, max_length=1000)


class ThreatResolveResult(BaseModel):
    threat_id: str
    resolved: bool
    resolved_at: datetime
    persisted: bool = Field(description="Whether a stored security event was marked resolved")


class RiskFactorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: str
    severity: str
    score: float
    description: str
    impact: str
    evidence: Dict[str, Any] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)


class BehavioralRisk(BaseModel):
    user_id: int
    analysis_days: int
    total_activities: int
    risk_score: float
    risk_level: str
    risk_factors: List[RiskFactorRead]
    recommendations: List[str]


SecurityReportKind = Literal[
    "threat_landscape",
    "risk_assessment",
    "compliance",
    "incident_analysis",
    "executive_dashboard",
]
ReportFormat = Literal["pdf", "excel", "csv"]
ReportFrequency = Literal["daily", "weekly", "monthly", "quarterly"]


class SecurityReportType(BaseModel):
    id: str
    name: str
    description: str
    data_points: int = Field(description="Audit rows of the last 30 days this report draws on")


class SecurityReportRequest(BaseModel):
    type: SecurityReportKind
    timeframe: Literal["1h", "24h", "7d"] = "7d"
    format: ReportFormat = "pdf"
    sections: List[str] = Field(default_factory=list, max_length=20)


class SecurityReportRead(BaseModel):
    report_id: str
    report_type: str
    name: str
    timeframe: str
    format: str
    sections: List[str]
    generated_at: datetime
    generated_by: Optional[int] = None
    status: str = "completed"
    metrics: Optional[SecurityMetrics] = Field(default=None, description="Present on the generation response only")


class SecurityReportSchedule(BaseModel):
    name: str = Field(min_length=1, max_length=191)
    type: SecurityReportKind
    frequency: ReportFrequency
    time: Optional[str] = Field(
        default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="HH:MM (UTC); defaults per frequency"
    )
    recipients: List[str] = Field(default_factory=list, max_length=50)
    format: ReportFormat = "pdf"


class ScheduledReportRead(BaseModel):
    schedule_id: str
    name: str
    type: str
    frequency: str
    time: Optional[str] = None
    recipients: List[str]
    format: str
    next_run: datetime
    scheduled_by: Optional[int] = None
    status: str = "active"


class SecurityReportMetrics(BaseModel):
    generated: int
    scheduled: int
    exports: int
    security_rows: int


class SecurityReportsOverview(BaseModel):
    report_types: List[SecurityReportType]
    recent_reports: List[SecurityReportRead]
    scheduled_reports: List[ScheduledReportRead]
    metrics: SecurityReportMetrics
    last_updated: datetime
