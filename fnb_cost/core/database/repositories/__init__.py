"""
Database repository layer using SQLModel.

This package contains all repository classes organized by business domain.
Each module provides data access operations for its corresponding entity
models on top of an async SQLAlchemy session.

Modules:
- base: AsyncBaseRepository interface, SqlRepository defaults and QueryBuilder
- users: User lookups, search and per-role counts
- properties: Property search
- outlets: Outlet listing per property
- categories: Category listing per type
- currencies: Currency search, default currency and property usage
- cost_entries: Food and beverage cost entries with details
- daily_summaries: Daily summaries, date ranges and cursor pagination
- audit_logs: Audit trail search, stats and retention cleanup
- property_access: Property grants and accessible property ids
- security_events: Persisted security threats
- bundle: SqlRepoBundle for dependency injection
"""

from .audit_logs import AuditLogQuery, AuditLogRepository
from .bundle import SqlRepoBundle, build_sql_repos_from_session
from .categories import CategoryRepository
from .cost_entries import BeverageCostRepository, CostEntryRepository, FoodCostRepository
from .currencies import CurrencyRepository
from .daily_summaries import DailySummaryRepository
from .outlets import OutletRepository
from .properties import PropertyRepository
from .property_access import PropertyAccessRepository
from .security_events import SecurityEventRepository
from .users import UserRepository

__all__ = [
    "AuditLogQuery",
    "AuditLogRepository",
    "BeverageCostRepository",
    "CategoryRepository",
    "CostEntryRepository",
    "CurrencyRepository",
    "DailySummaryRepository",
    "FoodCostRepository",
    "OutletRepository",
    "PropertyAccessRepository",
    "PropertyRepository",
    "SecurityEventRepository",
    "SqlRepoBundle",
    "UserRepository",
    "build_sql_repos_from_session",
]
