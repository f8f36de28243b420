"""
Database Session Management
===========================

Provides async database session factory and dependency injection.

Every request gets one session; the ``get_db`` dependency commits when the
handler returns and rolls back on any exception, so a request either applies
all of its writes or none of them.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from todolist.config import settings

logger = logging.getLogger(__name__)

# Global engine instance
_engine: AsyncEngine | None = None
_async_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """
    Get or create the async database engine.

    PostgreSQL uses a LIFO connection pool with periodic recycling:
    - pool_size: 10 connections
    - max_overflow: 20 additional connections
    - pool_recycle: 5 minutes
    SQLite (local runs) keeps SQLAlchemy's default pool.
    """
    global _engine

    if _engine is None:
        url = settings.database_url_async
        if not url:
            raise ValueError(
                "Database URL not configured. "
                "Please set DATABASE_URL environment variable."
            )

        pool_options = {}
        if not url.startswith("sqlite"):
            pool_options = {
                "pool_size": 10,
                "max_overflow": 20,
                "pool_recycle": 300,
                "pool_use_lifo": True,
                "pool_timeout": 30,
            }

        _engine = create_async_engine(
            url,
            echo=False,
            **pool_options,
        )

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the async session factory."""
    global _async_session_factory

    if _async_session_factory is None:
        engine = get_engine()
        _async_session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    return _async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Usage:
        @router.get("/tasks")
        async def list_tasks(db: Annotated[AsyncSession, Depends(get_db)]):
            ...

    The session is automatically committed on success or rolled back on error.
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """
    Initialize database connection.

    Called on application startup so the first request does not pay the
    connection cost.
    """
    engine = get_engine()
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    logger.info("Database connection established")


async def close_db() -> None:
    """
    Close database connections.

    Called on application shutdown to clean up resources.
    """
    global _engine, _async_session_factory

    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_factory = None
        logger.info("Database connections closed")
