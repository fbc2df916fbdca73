"""
Coffee API - Database Engine & Session Management
==================================================

What:  Async SQLAlchemy engine, session factory and lifecycle helpers,
       wrapped in a Database object built from an explicit URL or
       ServiceConfig.
How:   One Database instance per running application, stored on
       `app.state.database`. Route handlers receive a per-request
       AsyncSession through the get_db_session() dependency.

Lifecycle (driven by coffee_api.startup):
    Database.from_config(config)   → engine + session factory (no I/O)
    await database.authenticate()  → SELECT 1 on a fresh connection
    await database.sync_schema()   → CREATE TABLE IF NOT EXISTS for all models
    ... serve requests ...
    await database.dispose()       → close pooled connections on shutdown

Connection Pooling:
    pool_size / max_overflow:  bounded pool owned by the engine
    pool_pre_ping:             validates connections before use
    pool_recycle:              recycles connections before MySQL's wait_timeout
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Union

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from coffee_api.config import ServiceConfig

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so they share one metadata object,
    which sync_schema() uses to create missing tables.
    """
    pass


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Args:
        url:            SQLAlchemy URL (e.g. mysql+aiomysql://... or
                        sqlite+aiosqlite:///path for tests)
        **engine_kwargs: Passed through to create_async_engine (pool sizing)
    """

    def __init__(self, url: Union[str, URL], **engine_kwargs: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        # expire_on_commit=False keeps attribute values readable after commit,
        # so created rows can be serialized without another round trip
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_config(cls, config: ServiceConfig) -> "Database":
        """Build the production engine from a resolved ServiceConfig."""
        return cls(
            config.database_url,
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=config.db_pool_recycle,
            echo=config.log_level == "DEBUG",
        )

    @property
    def display_url(self) -> str:
        """URL with the password masked, safe for logs."""
        if isinstance(self.url, URL):
            return self.url.render_as_string(hide_password=True)
        return str(self.url)

    async def authenticate(self) -> None:
        """
        Open a connection and verify credentials against the live database.

        Raises whatever the driver raises (OperationalError, etc.); the
        orchestrator turns that into a fatal StartupError.
        """
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def sync_schema(self) -> None:
        """Create any missing tables registered on Base.metadata."""
        # Models must be imported so their tables are registered on the metadata
        from coffee_api.models import coffee  # noqa: F401

        logger.debug("Ensuring tables exist: %s", ", ".join(Base.metadata.tables))
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Provide a session that rolls back on error and is always closed.

        Writes are committed explicitly by the service layer, so a request
        that fails half way never leaves partial data behind.
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def dispose(self) -> None:
        """Close all connections in the pool."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The Database is taken from the application that received the request,
    so several independently configured apps can coexist in one process
    (tests rely on this).

    Example usage in a route:
        @router.get("/coffee/list")
        async def list_coffees(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
