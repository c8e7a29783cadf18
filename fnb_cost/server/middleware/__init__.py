"""HTTP middleware installed on the cost API application."""

from .logfire_middleware import LogfireMiddleware

__all__ = ["LogfireMiddleware"]
