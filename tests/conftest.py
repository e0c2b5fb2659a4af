"""Shared fixtures for asynchronous database access and cache doubles."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fightstats.cache import CacheClient
from fightstats.db.invalidation import FightDataSession
from fightstats.db.models import Base
from fightstats.db.repositories.fight_utils import install_sqlite_functions
from fightstats.settings import AppSettings
from tests.support.factories import FightDataBuilder
from tests.support.in_memory_redis import InMemoryRedis


@pytest_asyncio.fixture
async def session(cache: CacheClient) -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session whose commits invalidate ``cache``."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    install_sqlite_functions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(
        engine, expire_on_commit=False, class_=FightDataSession, cache=cache
    )
    async with async_session() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()


@pytest.fixture
def builder(session: AsyncSession) -> FightDataBuilder:
    return FightDataBuilder(session)


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache(fake_redis: InMemoryRedis) -> CacheClient:
    return CacheClient(fake_redis)


@pytest.fixture
def settings() -> AppSettings:
    """Settings isolated from the developer's environment."""
    return AppSettings(
        database_url=None,
        use_sqlite=True,
        cache_enabled=True,
        win_streak_mode="candidate_pool",
        use_fight_durations_view=True,
        accuracy_apply_threshold=True,
    )
