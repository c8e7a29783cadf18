"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
sharing one session, for services and API handlers.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .audit_logs import AuditLogRepository
from .categories import CategoryRepository
from .cost_entries import BeverageCostRepository, FoodCostRepository
from .currencies import CurrencyRepository
from .daily_summaries import DailySummaryRepository
from .outlets import OutletRepository
from .properties import PropertyRepository
from .property_access import PropertyAccessRepository
from .security_events import SecurityEventRepository
from .users import UserRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    users: UserRepository
    properties: PropertyRepository
    outlets: OutletRepository
    categories: CategoryRepository
    currencies: CurrencyRepository
    food_costs: FoodCostRepository
    beverage_costs: BeverageCostRepository
    daily_summaries: DailySummaryRepository
    audit_logs: AuditLogRepository
    property_access: PropertyAccessRepository
    security_events: SecurityEventRepository


def build_sql_repos_from_session(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a SqlRepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        users=UserRepository(session),
        properties=PropertyRepository(session),
        outlets=OutletRepository(session),
        categories=CategoryRepository(session),
        currencies=CurrencyRepository(session),
        food_costs=FoodCostRepository(session),
        beverage_costs=BeverageCostRepository(session),
        daily_summaries=DailySummaryRepository(session),
        audit_logs=AuditLogRepository(session),
        property_access=PropertyAccessRepository(session),
        security_events=SecurityEventRepository(session),
    )
