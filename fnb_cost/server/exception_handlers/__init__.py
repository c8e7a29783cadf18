"""
Exception handlers for the fnb-cost server.

This package contains the handlers that translate domain errors into HTTP
responses, a catch-all handler for unexpected failures, and a setup function
to register them with the FastAPI application.
"""

from .global_handler import domain_exception_handler, global_exception_handler, setup_exception_handlers

__all__ = ["domain_exception_handler", "global_exception_handler", "setup_exception_handlers"]
