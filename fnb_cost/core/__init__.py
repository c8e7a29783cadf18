"""Domain core of the cost API: models, persistence, analytics, logging and monitoring."""

from fnb_cost.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
