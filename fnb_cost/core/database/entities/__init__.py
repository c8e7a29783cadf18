"""
Database entity models.

This package contains all database entity models organized by business domain.
Each module represents either a single table or a pair of closely related tables.

Modules:
- users: Application users and their global role
- properties: Properties (tenant units)
- outlets: Points of sale within a property
- categories: Food and Beverage cost categories
- currencies: Reporting currencies and the default currency
- cost_entries: Food and beverage cost entries and their category details
- daily_summaries: Per-property daily revenue, budget and derived costs
- audit_logs: Append-only audit trail
- property_access: Per-property user access grants
- security_events: Persisted security threats
"""

from . import (
    audit_logs,
    categories,
    cost_entries,
    currencies,
    daily_summaries,
    outlets,
    properties,
    property_access,
    security_events,
    users,
)
from .audit_logs import AuditLog
from .categories import Category
from .cost_entries import (
    BeverageCostDetail,
    BeverageCostEntry,
    FoodCostDetail,
    FoodCostEntry,
)
from .currencies import Currency
from .daily_summaries import DailyFinancialSummary
from .outlets import Outlet
from .properties import Property
from .property_access import PropertyAccess
from .security_events import SecurityEvent
from .users import User

__all__ = [
    "AuditLog",
    "BeverageCostDetail",
    "BeverageCostEntry",
    "Category",
    "Currency",
    "DailyFinancialSummary",
    "FoodCostDetail",
    "FoodCostEntry",
    "Outlet",
    "Property",
    "PropertyAccess",
    "SecurityEvent",
    "User",
    "audit_logs",
    "categories",
    "cost_entries",
    "currencies",
    "daily_summaries",
    "outlets",
    "properties",
    "property_access",
    "security_events",
    "users",
]
