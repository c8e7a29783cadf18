"""
I/O models for API requests and responses.

These pydantic models are separate from the SQLModel entities so that the
HTTP contract can evolve without touching the schema. Read models use
``from_attributes`` to be built straight from entities.
"""

from .audit_logs import (
    AuditCleanupResult,
    AuditLogFilters,
    AuditLogPage,
    AuditLogRead,
    AuditLogStats,
    UserActivityReport,
)
from .categories import CategoryCreate, CategoryRead, CategoryUpdate
from .cost_entries import (
    CostDetailInput,
    CostDetailRead,
    CostEntryCreate,
    CostEntryRead,
    CostEntryUpdate,
    DetailedCostReport,
    OutletCostReport,
)
from .currencies import CurrencyCreate, CurrencyRead, CurrencyUpdate
from .daily_summaries import (
    DailySummaryCreate,
    DailySummaryPage,
    DailySummaryRead,
    DailySummaryUpdate,
)
from .outlets import OutletCreate, OutletRead, OutletUpdate
from .performance import CategoryTrendsReport, OutletEfficiencyReport, PropertyPerformanceReport
from .properties import OwnershipTransfer, PropertyCreate, PropertyRead, PropertyUpdate
from .property_access import (
    AccessCleanupResult,
    BulkAccessGrant,
    BulkGrantResult,
    PropertyAccessGrant,
    PropertyAccessRead,
    PropertyAccessUpdate,
)
from .reports import BudgetVsActuals, MonthlyProfitLoss, PredictiveAnalyticsReport
from .security import (
    BehavioralRisk,
    SecurityDashboard,
    SecurityReportRequest,
    SecurityReportSchedule,
    SecurityReportsOverview,
    ThreatResolve,
    ThreatResolveResult,
)
from .users import LoginRequest, LoginResponse, PasswordReset, UserCreate, UserRead, UserStatistics, UserUpdate

__all__ = [
    "AccessCleanupResult",
    "AuditCleanupResult",
    "AuditLogFilters",
    "AuditLogPage",
    "AuditLogRead",
    "AuditLogStats",
    "BehavioralRisk",
    "BudgetVsActuals",
    "BulkAccessGrant",
    "BulkGrantResult",
    "CategoryCreate",
    "CategoryRead",
    "CategoryTrendsReport",
    "CategoryUpdate",
    "CostDetailInput",
    "CostDetailRead",
    "CostEntryCreate",
    "CostEntryRead",
    "CostEntryUpdate",
    "CurrencyCreate",
    "CurrencyRead",
    "CurrencyUpdate",
    "DailySummaryCreate",
    "DailySummaryPage",
    "DailySummaryRead",
    "DailySummaryUpdate",
    "DetailedCostReport",
    "LoginRequest",
    "LoginResponse",
    "MonthlyProfitLoss",
    "OutletCostReport",
    "OutletCreate",
    "OutletEfficiencyReport",
    "OutletRead",
    "OutletUpdate",
    "OwnershipTransfer",
    "PasswordReset",
    "PredictiveAnalyticsReport",
    "PropertyAccessGrant",
    "PropertyAccessRead",
    "PropertyAccessUpdate",
    "PropertyCreate",
    "PropertyPerformanceReport",
    "PropertyRead",
    "PropertyUpdate",
    "SecurityDashboard",
    "SecurityReportRequest",
    "SecurityReportSchedule",
    "SecurityReportsOverview",
    "ThreatResolve",
    "ThreatResolveResult",
    "UserActivityReport",
    "UserCreate",
    "UserRead",
    "UserStatistics",
    "UserUpdate",
]
