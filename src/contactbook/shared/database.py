"""
Database engine and session management with async SQLAlchemy.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from contactbook.config import Settings
from contactbook.shared.exceptions import PersistenceError
from contactbook.shared.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for ORM models."""


class DatabaseManager:
    """Owns the connection pool and hands out sessions."""

    def __init__(self, settings: Settings) -> None:
        """Initialize database manager.

        Args:
            settings: Application settings holding the DSN and pool limits.
        """
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        settings = self._settings
        if settings.is_sqlite:
            # In-memory SQLite lives inside a single connection.
            if ":memory:" in settings.db_dsn:
                return {"poolclass": StaticPool}
            return {}
        return {
            "pool_pre_ping": True,
            "pool_size": settings.db_max_idle_conns,
            "max_overflow": settings.db_max_open_conns - settings.db_max_idle_conns,
            "pool_recycle": int(settings.db_max_idle_time.total_seconds()),
            "pool_timeout": settings.db_pool_timeout,
        }

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the database engine."""
        if self._engine is None:
            self._engine = create_async_engine(
                self._settings.db_dsn,
                echo=False,
                **self._engine_options(),
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Create a new session; commit on success, roll back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise PersistenceError("Failed to commit transaction") from exc
            except Exception:
                await session.rollback()
                raise

    async def ping(self, timeout: float = 5.0) -> None:
        """Verify that a connection can be established.

        Raises:
            PersistenceError: If the database is unreachable within ``timeout``.
        """
        try:
            async with asyncio.timeout(timeout):
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, TimeoutError) as exc:
            raise PersistenceError("Database is unreachable") from exc

    async def create_schema(self) -> None:
        """Create any missing tables registered on ``Base.metadata``."""
        # Register models on the metadata before create_all.
        import contactbook.contacts.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def close(self) -> None:
        """Close the database engine."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session.

    Depend on it with ``scope="function"`` so the commit runs before the
    response is sent.
    """
    async with request.app.state.context.db.session() as session:
        yield session


__all__ = [
    "Base",
    "DatabaseManager",
    "get_db_session",
]
