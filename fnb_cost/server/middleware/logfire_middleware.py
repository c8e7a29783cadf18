"""Per-request timing for the cost API.

Every request is measured and reported through ``log_api_request``. The
elapsed milliseconds go back to the caller in ``X-Process-Time``; anything
slower than ``SLOW_REQUEST_MS`` is flagged with a warning that names the
acting user so slow reports can be traced to a property team.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.monitoring import log_api_request

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000


def _elapsed_ms(started: float) -> float:
    return (time.time() - started) * 1000


class LogfireMiddleware(BaseHTTPMiddleware):
    """Time each request and forward the figures to monitoring."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.time()
        request.state.start_time = started
        route = {"method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = _elapsed_ms(started)
            log_api_request(status_code=500, duration_ms=elapsed, **route)
            logger.error(
                f"Unhandled error on {route['method']} {route['path']}",
                exc_info=True,
                extra={**route, "duration_ms": elapsed, "error": str(exc)},
            )
            raise

        elapsed = _elapsed_ms(started)
        log_api_request(status_code=response.status_code, duration_ms=elapsed, **route)
        response.headers["X-Process-Time"] = str(elapsed)

        if elapsed <= SLOW_REQUEST_MS:
            logger.debug(f"{route['method']} {route['path']} {response.status_code} in {elapsed:.2f}ms")
            return response

        logger.warning(
            f"Slow API request: {route['method']} {route['path']} took {elapsed:.2f}ms",
            extra={
                **route,
                "duration_ms": elapsed,
                "status_code": response.status_code,
            },
        )
        return response
