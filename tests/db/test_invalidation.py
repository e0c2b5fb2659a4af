"""Cached win streaks are dropped after committed writes to fight data."""

from __future__ import annotations

import pytest
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.cache import WIN_STREAKS_KEY, CacheClient
from fightstats.db.invalidation import (
    fight_data_written,
    invalidating_writes,
)
from fightstats.db.models import Fight, Fighter, FightStat
from tests.support.factories import FightDataBuilder
from tests.support.in_memory_redis import InMemoryRedis


async def _seed(session: AsyncSession, builder: FightDataBuilder, cache: CacheClient) -> Fight:
    (fight,) = await builder.record("Hero", ["W"])
    await session.commit()
    await cache.set_json(WIN_STREAKS_KEY, [])
    return fight


@pytest.mark.asyncio
async def test_fight_write_invalidates_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    await _seed(session, builder, cache)

    async with invalidating_writes(session, cache):
        await builder.record("Hero", ["L"])

    assert WIN_STREAKS_KEY not in fake_redis._store
    assert not fight_data_written(session)


@pytest.mark.asyncio
async def test_fighter_only_write_keeps_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    await _seed(session, builder, cache)

    async with invalidating_writes(session, cache):
        session.add(Fighter(name="New Signing"))

    assert WIN_STREAKS_KEY in fake_redis._store


@pytest.mark.asyncio
async def test_bulk_update_invalidates_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    fight = await _seed(session, builder, cache)

    async with invalidating_writes(session, cache):
        await session.execute(update(Fight).where(Fight.id == fight.id).values(outcome="L/W"))

    assert WIN_STREAKS_KEY not in fake_redis._store


@pytest.mark.asyncio
async def test_failed_block_rolls_back_and_keeps_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    await _seed(session, builder, cache)

    with pytest.raises(RuntimeError):
        async with invalidating_writes(session, cache):
            await builder.record("Hero", ["L"])
            raise RuntimeError("import aborted")

    assert WIN_STREAKS_KEY in fake_redis._store
    assert not fight_data_written(session)


@pytest.mark.asyncio
async def test_plain_commit_of_round_stats_invalidates_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    fight = await _seed(session, builder, cache)
    hero = await builder.fighter("Hero")

    session.add(FightStat(fight_id=fight.id, fighter_id=hero.id, round=2, knockdowns=1))
    await session.commit()

    assert WIN_STREAKS_KEY not in fake_redis._store
    assert not fight_data_written(session)

    # The flag does not outlive the commit that consumed it.
    await cache.set_json(WIN_STREAKS_KEY, [])
    async with invalidating_writes(session, cache):
        session.add(Fighter(name="Late Replacement"))

    assert WIN_STREAKS_KEY in fake_redis._store


@pytest.mark.asyncio
async def test_plain_commit_without_fight_data_keeps_streaks(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    await _seed(session, builder, cache)

    session.add(Fighter(name="Prospect"))
    await session.commit()

    assert WIN_STREAKS_KEY in fake_redis._store


@pytest.mark.asyncio
async def test_rollback_clears_pending_fight_writes(
    session: AsyncSession, builder: FightDataBuilder, cache: CacheClient, fake_redis: InMemoryRedis
) -> None:
    await _seed(session, builder, cache)

    await builder.record("Hero", ["L"])
    assert fight_data_written(session)
    await session.rollback()

    assert not fight_data_written(session)
    session.add(Fighter(name="Prospect"))
    await session.commit()
    assert WIN_STREAKS_KEY in fake_redis._store
