"""
Database connection and session management.

Provides the async SQLAlchemy engine (the process-wide connection pool),
the session factory bound to it, and table creation.

The engine is created once at application startup and handed down
explicitly (see app.main and app.core.dependencies); this module keeps no
module-level engine.
"""

import logging
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys unless asked per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(url: str | None = None) -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    Uses asyncpg for PostgreSQL and aiosqlite for SQLite. Connection
    health checks via pool_pre_ping.

    Args:
        url: Database URL (defaults to settings.async_url)

    Returns:
        Configured async SQLAlchemy engine
    """
    url = url or settings.async_url
    if not url:
        raise RuntimeError("DATABASE_URL is required")

    if url.startswith("sqlite"):
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live as long as their connection
        if ":memory:" in url or url.rstrip("/").endswith("aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, echo=False, **kwargs)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(
            url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_timeout=settings.database_pool_timeout,
            pool_recycle=3600,  # Recycle connections after 1 hour
            pool_pre_ping=True,  # Verify connections before use
            echo=False,
            connect_args={"server_settings": {"timezone": "UTC"}, "timeout": 30},
        )

    logger.info("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the async session factory bound to the engine.

    Returns:
        Async sessionmaker factory
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all ORM tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")
