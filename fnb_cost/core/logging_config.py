"""
Logging setup for the cost API.

Console output always goes through the root logger. A ``fnb_cost.log`` file
is added when file logging is switched on in settings. Analytics and services
log at DEBUG so forecast and variance figures can be traced. Database and
HTTP client libraries are held at WARNING.
"""

import logging
import os
from pathlib import Path
from typing import Optional

_TRUTHY = ("true", "1", "yes")


def _get_logging_config():
    """Read the logging section of settings, or the raw env vars when settings cannot load yet."""
    try:
        from fnb_cost.server.core.config import settings
    except Exception:
        return {
            "log_level": os.getenv("FNB_COST_LOG_LEVEL", "INFO").upper(),
            "log_format": os.getenv("FNB_COST_LOG_FORMAT", "detailed"),
            "log_file_dir": os.getenv("FNB_COST_LOG_FILE_DIR", "logs"),
            "enable_file_logging": os.getenv("FNB_COST_ENABLE_FILE_LOGGING", "false").lower() in _TRUTHY,
        }
    return {
        "log_level": settings.log_level.upper(),
        "log_format": settings.log_format,
        "log_file_dir": settings.log_file_dir,
        "enable_file_logging": settings.enable_file_logging,
    }


_config = _get_logging_config()
LOG_LEVEL = _config["log_level"]
LOG_FORMAT = _config["log_format"]
LOG_FILE_DIR = _config["log_file_dir"]
ENABLE_FILE_LOGGING = _config["enable_file_logging"]

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)
_FORMATS = {"simple": SIMPLE_FORMAT, "json": JSON_FORMAT}

MODULE_LOG_LEVELS = {
    "fnb_cost.core": "INFO",
    "fnb_cost.core.database": "INFO",
    "fnb_cost.core.analytics": "DEBUG",
    "fnb_cost.server": "INFO",
    "fnb_cost.server.api": "DEBUG",
    "fnb_cost.server.services": "DEBUG",
    "fnb_cost.server.core": "INFO",
    # noisy dependencies
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "httpx": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def _file_handler(formatter: logging.Formatter) -> logging.Handler:
    log_dir = Path(LOG_FILE_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / "fnb_cost.log")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> None:
    """
    Replace the root handlers with a console handler and an optional file handler.

    Args:
        log_level: Console threshold, defaults to the configured level
        log_format: ``simple``, ``detailed`` or ``json``; unknown names fall back to ``detailed``
        enable_file: Allow the file handler; it is only added when the setting is also on
    """
    level = (log_level or LOG_LEVEL).upper()
    fmt = log_format or LOG_FORMAT
    formatter = logging.Formatter(_FORMATS.get(fmt, DETAILED_FORMAT), datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    file_logging = enable_file and ENABLE_FILE_LOGGING
    if file_logging:
        root.addHandler(_file_handler(formatter))

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root.info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
