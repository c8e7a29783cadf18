"""
fnb-cost Server Package.

This package contains the web server implementation for the fnb-cost platform.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    exception_handlers: Mapping of domain errors to HTTP responses.
    middleware: Request logging middleware.
    services: Business logic and service layer.
"""
