"""
HTTP translation of errors raised while serving cost API requests.

``FnbCostError`` subclasses already know their status code (404 for a
missing outlet, 403 for a property outside the caller's access and so on)
and are returned as ``{"detail": ...}``. Any other exception is a bug: it is
logged with the request context and answered with a 500 carrying an error id
that a property manager can quote to support.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fnb_cost.core.errors import FnbCostError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.monitoring import log_error

logger = get_logger(__name__)


def _route(request: Request) -> dict:
    return {"method": request.method, "path": request.url.path}


async def domain_exception_handler(request: Request, exc: FnbCostError) -> JSONResponse:
    error_type = type(exc).__name__
    route = _route(request)
    logger.info(
        f"{error_type} in {route['method']} {route['path']}: {exc.message}",
        extra={**route, "status_code": exc.status_code, "error_type": error_type},
    )
    body = {"detail": exc.message}
    if exc.details is not None:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = id(exc)
    error_type = type(exc).__name__
    route = _route(request)

    logger.error(
        f"Unhandled exception [{error_id}] in {route['method']} {route['path']}: {exc}",
        exc_info=True,
        extra={
            **route,
            "error_id": error_id,
            "error_type": error_type,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "traceback": traceback.format_exc(),
        },
    )
    log_error(error_type, str(exc), {"error_id": error_id, "path": route["path"]})

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error_id": error_id, "error_type": error_type},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FnbCostError, domain_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered")
