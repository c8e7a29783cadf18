"""
ASGI application for the cost API.

Wires CORS and request timing middleware, the domain error handlers and every
v1 router. Run it with ``python -m fnb_cost.server`` or any ASGI server
pointed at ``fnb_cost.server.main:app``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fnb_cost.core.database.session import init_db
from fnb_cost.core.logging_config import get_logger, setup_logging
from fnb_cost.core.monitoring import initialize_logfire

from .api.v1 import (
    audit_logs,
    auth,
    categories,
    cost_entries,
    currencies,
    daily_summaries,
    health,
    outlets,
    properties,
    property_access,
    reports,
    security,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables and seed categories before serving; a failure is logged, not fatal."""
    try:
        logger.info("Starting up fnb-cost server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down fnb-cost server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    fnb-cost Server API

    Food and beverage cost management for hotels and restaurants: daily cost entry per outlet,
    daily financial summaries, budget vs actual reporting, forecasting, audit trail and
    security intelligence over a multi-property tenant model.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(LogfireMiddleware)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users")
app.include_router(properties.router, prefix=f"{constant.API_V1_STR}/properties")
app.include_router(outlets.router, prefix=f"{constant.API_V1_STR}/outlets")
app.include_router(categories.router, prefix=f"{constant.API_V1_STR}/categories")
app.include_router(currencies.router, prefix=f"{constant.API_V1_STR}/currencies")
app.include_router(cost_entries.food_router, prefix=f"{constant.API_V1_STR}/food-costs")
app.include_router(cost_entries.beverage_router, prefix=f"{constant.API_V1_STR}/beverage-costs")
app.include_router(daily_summaries.router, prefix=f"{constant.API_V1_STR}/daily-summaries")
app.include_router(audit_logs.router, prefix=f"{constant.API_V1_STR}/audit-logs")
app.include_router(property_access.router, prefix=f"{constant.API_V1_STR}/property-access")
app.include_router(reports.router, prefix=f"{constant.API_V1_STR}/reports")
app.include_router(security.router, prefix=f"{constant.API_V1_STR}/security")
