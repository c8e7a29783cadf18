"""Persistence for properties, outlets, cost entries, summaries, budgets and audit data.

``entities`` holds the SQLModel tables, ``repositories`` the async data
access objects, and ``session`` the process-wide engine used by the API.
"""

from .base import Base
from .session import async_session_maker, engine, get_session, init_db
from .utils import create_all, create_engine, create_sessionmaker

__all__ = [
    "Base",
    "async_session_maker",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
]
