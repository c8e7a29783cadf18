"""
Service Dependencies.

Builds the request-scoped repositories, the calling user and the services
used by API endpoints. Every service of a request shares one session.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fnb_cost.core.database.entities import User
from fnb_cost.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from fnb_cost.core.database.session import get_session
from fnb_cost.core.errors import AuthenticationError, PermissionDeniedError, RateLimitedError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.monitoring import log_security_event
from fnb_cost.server.core.config import settings

from .activity import ActivityReportService
from .audit import AuditLogService, AuditService, ClientInfo, resolve_client_ip
from .categories import CategoryService
from .cost_entries import BEVERAGE, FOOD, CostEntryService
from .currencies import CurrencyService
from .daily_summaries import DailySummaryService
from .forecasting import ForecastingService
from .outlets import OutletService
from .performance import PerformanceReportService
from .properties import PropertyService
from .property_access import PropertyAccessService
from .rate_limit import limiter
from .reports import ReportService
from .security import SecurityService
from .tokens import decode_access_token
from .users import AuthService, UserService

logger = get_logger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_repos(session: SessionDep) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


ReposDep = Annotated[SqlRepoBundle, Depends(get_repos)]


def get_client_info(request: Request) -> ClientInfo:
    peer = request.client.host if request.client else None
    return ClientInfo(
        ip_address=resolve_client_ip(request.headers, peer),
        user_agent=request.headers.get("user-agent"),
    )


ClientInfoDep = Annotated[ClientInfo, Depends(get_client_info)]


bearer_scheme = HTTPBearer(auto_error=False)

BearerDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_current_user(repos: ReposDep, credentials: BearerDep) -> User:
    """
    Resolve the caller from the bearer token issued at login.

    Raises:
        AuthenticationError: No token, a bad or expired token, or an unknown user
        PermissionDeniedError: The user is deactivated
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    claims = decode_access_token(credentials.credentials)
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")
    user = await repos.users.get_by_id(user_id)
    if user is None:
        logger.info(f"Token for unknown user id {user_id}")
        raise AuthenticationError("Unknown user")
    if not user.is_active:
        raise PermissionDeniedError("User account is inactive")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_audit_service(repos: ReposDep, user: CurrentUserDep, client: ClientInfoDep) -> AuditService:
    return AuditService(repos, user, client)


AuditDep = Annotated[AuditService, Depends(get_audit_service)]


async def _enforce_rate_limit(key: str, scope: str, limit: int, window_seconds: int, audit: AuditService) -> None:
    if limiter.allow(key, limit, window_seconds):
        return
    retry_after = limiter.retry_after(key, window_seconds)
    logger.warning(f"Rate limit hit for {key}: {limit} per {window_seconds}s")
    await audit.log(
        "RATE_LIMIT_EXCEEDED",
        "auth",
        details={"scope": scope, "limit": limit, "window_seconds": window_seconds},
    )
    log_security_event("rate_limit_exceeded", "medium", scope=scope, ip=audit.client.ip_address)
    raise RateLimitedError("Too many attempts, try again later", retry_after=retry_after)


async def enforce_login_rate_limit(repos: ReposDep, client: ClientInfoDep) -> None:
    """Login attempts per client IP."""
    security = settings.security
    await _enforce_rate_limit(
        f"login:{client.ip_address or 'unknown'}",
        "login",
        security.login_rate_limit,
        security.login_rate_window_seconds,
        AuditService(repos, None, client),
    )


async def enforce_sensitive_rate_limit(user: CurrentUserDep, audit: AuditDep) -> None:
    """Password resets per acting user."""
    security = settings.security
    await _enforce_rate_limit(
        f"sensitive:{user.id}",
        "password_reset",
        security.sensitive_rate_limit,
        security.sensitive_rate_window_seconds,
        audit,
    )


def get_auth_service(repos: ReposDep, client: ClientInfoDep) -> AuthService:
    return AuthService(repos, AuditService(repos, None, client))


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_user_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> UserService:
    return UserService(repos, user, audit)


def get_property_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> PropertyService:
    return PropertyService(repos, user, audit)


def get_outlet_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> OutletService:
    return OutletService(repos, user, audit)


def get_category_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> CategoryService:
    return CategoryService(repos, user, audit)


def get_currency_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> CurrencyService:
    return CurrencyService(repos, user, audit)


def get_food_cost_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> CostEntryService:
    return CostEntryService(FOOD, repos, user, audit)


def get_beverage_cost_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> CostEntryService:
    return CostEntryService(BEVERAGE, repos, user, audit)


def get_daily_summary_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> DailySummaryService:
    return DailySummaryService(repos, user, audit)


def get_audit_log_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> AuditLogService:
    return AuditLogService(repos, user, audit)


def get_property_access_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> PropertyAccessService:
    return PropertyAccessService(repos, user, audit)


def get_report_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> ReportService:
    return ReportService(repos, user, audit)


def get_forecasting_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> ForecastingService:
    return ForecastingService(repos, user, audit)


def get_performance_report_service(
    repos: ReposDep, user: CurrentUserDep, audit: AuditDep
) -> PerformanceReportService:
    return PerformanceReportService(repos, user, audit)


def get_activity_report_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> ActivityReportService:
    return ActivityReportService(repos, user, audit)


def get_security_service(repos: ReposDep, user: CurrentUserDep, audit: AuditDep) -> SecurityService:
    return SecurityService(repos, user, audit)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
PropertyServiceDep = Annotated[PropertyService, Depends(get_property_service)]
OutletServiceDep = Annotated[OutletService, Depends(get_outlet_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
CurrencyServiceDep = Annotated[CurrencyService, Depends(get_currency_service)]
FoodCostServiceDep = Annotated[CostEntryService, Depends(get_food_cost_service)]
BeverageCostServiceDep = Annotated[CostEntryService, Depends(get_beverage_cost_service)]
DailySummaryServiceDep = Annotated[DailySummaryService, Depends(get_daily_summary_service)]
AuditLogServiceDep = Annotated[AuditLogService, Depends(get_audit_log_service)]
ActivityReportServiceDep = Annotated[ActivityReportService, Depends(get_activity_report_service)]
PropertyAccessServiceDep = Annotated[PropertyAccessService, Depends(get_property_access_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
ForecastingServiceDep = Annotated[ForecastingService, Depends(get_forecasting_service)]
PerformanceReportServiceDep = Annotated[PerformanceReportService, Depends(get_performance_report_service)]
SecurityServiceDep = Annotated[SecurityService, Depends(get_security_service)]
