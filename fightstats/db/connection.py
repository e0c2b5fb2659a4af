from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fightstats.cache import CacheBackend
from fightstats.db.invalidation import FightDataSession
from fightstats.db.repositories.fight_utils import install_sqlite_functions
from fightstats.monitoring import setup_query_monitoring
from fightstats.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)


def create_engine(settings: AppSettings | None = None) -> AsyncEngine:
    """Create the async SQLAlchemy engine for the statistics store.

    PostgreSQL connections get a warm pool; the SQLite fallback runs with the
    driver defaults.
    """

    resolved = settings or get_settings()
    url = resolved.resolved_database_url

    if resolved.database_type == "postgresql":
        engine = create_async_engine(
            url,
            future=True,
            echo=False,
            pool_size=10,  # Maintain 10 warm connections
            max_overflow=20,  # Allow up to 30 total connections
            pool_pre_ping=True,  # Validate connections before use
            pool_recycle=1800,  # Recycle connections every 30 min
            pool_timeout=30,  # Timeout for getting connection from pool
        )
    else:
        logger.info("Using SQLite database at %s", url)
        engine = create_async_engine(url, future=True, echo=False)
        install_sqlite_functions(engine)

    setup_query_monitoring(engine, slow_query_threshold=resolved.slow_query_threshold)
    return engine


def create_session_factory(
    engine: AsyncEngine, cache: CacheBackend | None = None
) -> async_sessionmaker[AsyncSession]:
    """Sessions drop cached win streaks when a commit writes fight data.

    ``cache`` defaults to the shared client resolved at commit time.
    """
    return async_sessionmaker(
        engine, expire_on_commit=False, class_=FightDataSession, cache=cache
    )


# Global engine/session instances shared by every caller in the process
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the global engine instance."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Lazily create a session factory bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def get_async_session_context() -> AsyncIterator[AsyncSession]:
    """
    Async context manager for scripts/CLI tasks that need manual session control.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def dispose_engine() -> None:
    """Dispose the global engine so pooled connections are released."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = [
    "create_engine",
    "create_session_factory",
    "dispose_engine",
    "get_async_session_context",
    "get_engine",
    "get_session_factory",
]
