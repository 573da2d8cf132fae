"""
DevConnect Backend - Database Session Management
==================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   `Database` wraps an async engine built from Settings; the request
       dependency opens one session per request, commits on success and
       rolls back on error.
Who:   Built by create_app() and stored on app.state.database.

Engine selection:
    postgresql+asyncpg://...  → pooled engine (pool_size / max_overflow)
    sqlite+aiosqlite://       → StaticPool, one shared connection (tests)
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from devconnect.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the application, the test
    fixtures (create_all) and Alembic autogenerate.
    """
    pass


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    if settings.database_url.startswith("sqlite"):
        # In-memory SQLite lives only as long as its connection, so every
        # session must share the same one
        return create_async_engine(
            settings.database_url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.log_level == "DEBUG",
        )

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


class Database:
    """
    Owns the engine and session factory for one application instance.

    Attributes:
        engine:           AsyncEngine (connection pool)
        session_factory:  async_sessionmaker producing AsyncSession objects
    """

    def __init__(self, settings: Settings):
        self.engine = build_engine(settings)
        # expire_on_commit=False: ORM objects stay readable after the
        # dependency commits, while the response is being serialized
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata."""
        # Importing the models registers them with Base.metadata
        from devconnect.models import connection_request, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close all pooled connections (called on shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's session factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
