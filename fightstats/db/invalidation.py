"""Clear the cached win streak leaderboard after writes to fight data.

Session events flag any flush or bulk statement touching ``Fight`` or
``FightStat``; a rollback clears the flag.  :class:`FightDataSession`, the
session class handed out by :func:`fightstats.db.connection.create_session_factory`,
deletes every cached win streak blob after a commit that carried the flag.
:func:`invalidating_writes` does the same for sessions of any other class.
Invalidation is coarse: any such write drops the whole leaderboard.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from fightstats.cache import CacheBackend, get_cache_client, invalidate_win_streaks
from fightstats.db.models import Fight, FightStat

logger = logging.getLogger(__name__)

FIGHT_DATA_WRITTEN = "fightstats_fight_data_written"

_TRACKED_CLASSES: tuple[type, ...] = (Fight, FightStat)


def _touches_fight_data(instances: Any) -> bool:
    return any(isinstance(instance, _TRACKED_CLASSES) for instance in instances)


@event.listens_for(Session, "after_flush")
def _flag_flushed_fight_data(session: Session, flush_context: Any) -> None:
    if (
        _touches_fight_data(session.new)
        or _touches_fight_data(session.dirty)
        or _touches_fight_data(session.deleted)
    ):
        session.info[FIGHT_DATA_WRITTEN] = True


@event.listens_for(Session, "do_orm_execute")
def _flag_bulk_fight_data(orm_execute_state: Any) -> None:
    if not (
        orm_execute_state.is_insert
        or orm_execute_state.is_update
        or orm_execute_state.is_delete
    ):
        return
    if any(mapper.class_ in _TRACKED_CLASSES for mapper in orm_execute_state.all_mappers):
        orm_execute_state.session.info[FIGHT_DATA_WRITTEN] = True


@event.listens_for(Session, "after_rollback")
def _discard_rolled_back_writes(session: Session) -> None:
    session.info.pop(FIGHT_DATA_WRITTEN, None)


def fight_data_written(session: AsyncSession | Session) -> bool:
    return bool(session.info.get(FIGHT_DATA_WRITTEN))


async def invalidate_committed_writes(
    session: AsyncSession, cache: CacheBackend | None = None
) -> bool:
    """Drop cached win streaks if the last commit wrote fight data.

    Clears the flag either way.  Without ``cache`` the shared client from
    :func:`fightstats.cache.get_cache_client` is used.
    """

    if not session.info.pop(FIGHT_DATA_WRITTEN, False):
        return False
    logger.info("Fight data changed; invalidating cached win streaks")
    await invalidate_win_streaks(cache if cache is not None else await get_cache_client())
    return True


class FightDataSession(AsyncSession):
    """``AsyncSession`` whose ``commit`` also invalidates cached win streaks."""

    def __init__(self, *args: Any, cache: CacheBackend | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.cache = cache

    async def commit(self) -> None:
        await super().commit()
        await invalidate_committed_writes(self, self.cache)


@asynccontextmanager
async def invalidating_writes(
    session: AsyncSession, cache: CacheBackend
) -> AsyncIterator[AsyncSession]:
    """Commit the block's writes and drop stale win streaks afterwards.

    The cache is only touched after a successful commit.  A failing block is
    rolled back and leaves the cache alone.
    """

    try:
        yield session
        # Plain commit so ``cache`` is the backend invalidated below.
        await AsyncSession.commit(session)
    except Exception:
        await session.rollback()
        raise

    await invalidate_committed_writes(session, cache)


__all__ = [
    "FIGHT_DATA_WRITTEN",
    "FightDataSession",
    "fight_data_written",
    "invalidate_committed_writes",
    "invalidating_writes",
]
