"""Error types for the fnb-cost service layer.

Defines a small hierarchy of exceptions raised by services to signal missing
records, permission failures and rejected input. The server maps each type to
an HTTP status code in ``fnb_cost.server.exception_handlers``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FnbCostError(Exception):
    """Base error for all fnb-cost domain exceptions.

    Args:
        message: Human-readable error description.
        details: Optional structured payload returned to the client.
    """

    status_code: int = 400
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(FnbCostError):
    """Raised when a requested record does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any) -> None:
        super().__init__(f"{resource} {resource_id} not found")
        self.resource = resource
        self.resource_id = resource_id


class AuthenticationError(FnbCostError):
    """Raised when the caller cannot be identified."""

    status_code = 401


class PermissionDeniedError(FnbCostError):
    """Raised when the caller lacks a permission or property access."""

    status_code = 403


class ValidationFailedError(FnbCostError):
    """Raised when input violates a business rule."""

    status_code = 400


class ConflictError(FnbCostError):
    """Raised when a write collides with an existing unique record."""

    status_code = 409


class RateLimitedError(FnbCostError):
    """Raised when a caller exceeds an attempt limit; ``retry_after`` is in seconds."""

    status_code = 429

    def __init__(self, message: str, *, retry_after: int) -> None:
        super().__init__(message, details={"retry_after": retry_after})
        self.headers = {"Retry-After": str(retry_after)}
