"""
Async database engine and session factory (asyncpg).

The engine is created lazily on first use so importing the package never
needs a reachable database.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from pharmacy_delivery.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_async_database_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create the async engine (NullPool in DEBUG, pooled otherwise)."""
    settings = settings or get_settings()
    if not settings.DB_NAME:
        raise ValueError("Database name is required (DB_NAME)")

    base_config = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }

    if settings.DEBUG:
        logger.info("Creating async database engine for DEVELOPMENT (NullPool)")
        engine_config = {**base_config, "poolclass": NullPool}
    else:
        logger.info("Creating async database engine for PRODUCTION (pooled)")
        engine_config = {
            **base_config,
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_recycle": settings.DB_POOL_RECYCLE,
            "pool_timeout": 30,
        }

    try:
        return create_async_engine(settings.database_url, **engine_config)
    except Exception as e:
        logger.error(f"Failed to create async database engine: {e}")
        raise


def get_async_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        _engine = create_async_database_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_async_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for async database work.

    Commits on success, rolls back and re-raises on error.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception as e:
            logger.error(f"Async database error: {e}")
            await session.rollback()
            raise


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
