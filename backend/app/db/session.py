"""
Database session configuration.

The persistence handle is an explicitly constructed ``Database`` object.
The application lifespan creates it, stores it on ``app.state.database`` and
disposes it on shutdown; request handlers reach it through ``get_db``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


class Database:
    """
    Owns the async engine and session factory for one database URL.

    Lifecycle:
        db = Database(url)      # nothing is opened yet
        await db.connect()      # engine + session factory are created
        await db.create_all()   # optional: create missing tables
        ...
        await db.dispose()      # pool is closed, handle can be reconnected
    """

    def __init__(self, url: str, echo: bool = False, pool_size: int = 20, max_overflow: int = 10):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    async def connect(self) -> None:
        if self.engine is not None:
            return

        engine_kwargs = {"echo": self.echo, "future": True}
        # SQLite (used for local runs and tests) has no connection pool sizing.
        if not self.url.startswith("sqlite"):
            engine_kwargs.update(pool_size=self.pool_size, max_overflow=self.max_overflow)

        self.engine = create_async_engine(self.url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
        logger.info("Database engine created for %s", self.engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        """Create tables for every model registered on ``Base``."""
        # Imported for their side effect of registering tables on Base.
        from backend.app.models import alert, driver, fuel, maintenance, trip, user, vehicle  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.session_factory is None:
            raise RuntimeError("Database.connect() must be awaited before opening sessions")
        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database engine disposed")
        self.engine = None
        self.session_factory = None


async def get_db(request: Request):
    """
    FastAPI dependency for database sessions.

    Yields an async database session from the application's ``Database``.
    Uncommitted work is rolled back if the request fails, so a multi-row
    status update either commits as a whole or not at all.
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
