"""
Database package - SQLAlchemy base and async session management
"""

from .async_db import (
    create_async_database_engine,
    dispose_engine,
    get_async_db_context,
    get_async_engine,
    get_session_factory,
)
from .base import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "create_async_database_engine",
    "dispose_engine",
    "get_async_db_context",
    "get_async_engine",
    "get_session_factory",
]
