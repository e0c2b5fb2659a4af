"""Longest win streak leaderboard.

Two strategies are available:

``candidate_pool``
    Rank every fighter by total wins, keep ``pool_multiplier * limit`` of them
    and scan only their histories.  The histories of the whole pool are loaded
    with a single query and grouped in memory.  A fighter outside the pool
    cannot appear even if their streak would qualify; the multiplier bounds
    how likely that is.

``exact``
    Scan every fighter with the row-number-minus-running-wins technique in
    SQL: within one fighter's ordered fights, consecutive wins share the same
    ``row_number - wins_so_far`` value, so the longest group of wins is the
    longest streak.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Final

from sqlalchemy import func, select

from fightstats.db.models import Event, Fight, Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT
from fightstats.db.repositories.fight_utils import (
    result_for_fighter,
    well_formed_bout_clause,
    well_formed_outcome_clause,
    win_flag,
)
from fightstats.db.repositories.top_performers.results import (
    FighterRecord,
    ResultsMixin,
)
from fightstats.errors import MalformedFightRecord
from fightstats.schemas.top_performers import WinStreakEntry
from fightstats.settings import DEFAULT_WIN_STREAK_POOL_MULTIPLIER

logger = logging.getLogger(__name__)

HistoryRow = tuple[int, str, str, date]

DEFAULT_POOL_MULTIPLIER: Final = DEFAULT_WIN_STREAK_POOL_MULTIPLIER


def longest_streak(history: Iterable[HistoryRow], fighter_name: str) -> int:
    """Return the longest run of consecutive wins in a date-ordered history.

    ``history`` holds ``(fight_id, bout, outcome, event_date)`` rows.  A loss,
    draw, no contest or a bout the fighter cannot be located in ends the run.
    Fights whose bout or outcome cannot be split into two positions are
    skipped without touching the running count.
    """

    longest = 0
    current = 0
    for fight_id, bout, outcome, _event_date in history:
        try:
            result = result_for_fighter(bout, outcome, fighter_name, fight_id=fight_id)
        except MalformedFightRecord as exc:
            logger.debug("Skipping fight in streak scan: %s", exc)
            continue
        if result == "win":
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


def select_candidate_pool(
    records: Sequence[FighterRecord], *, limit: int, multiplier: int
) -> list[FighterRecord]:
    """Top ``multiplier * limit`` fighters by total wins, ties by name."""

    ordered = sorted(records, key=lambda record: (-record.total_wins, record.fighter_name))
    return ordered[: min(len(ordered), multiplier * limit)]


class WinStreakMixin(ResultsMixin):
    """Compute the longest win streak leaderboard."""

    async def longest_win_streaks(
        self,
        *,
        mode: str = "candidate_pool",
        pool_multiplier: int = DEFAULT_POOL_MULTIPLIER,
        limit: int = TOP_PERFORMERS_LIMIT,
    ) -> list[WinStreakEntry]:
        if mode == "exact":
            return await self._exact_win_streaks(limit=limit)
        return await self._candidate_pool_win_streaks(
            limit=limit, multiplier=pool_multiplier
        )

    async def _candidate_pool_win_streaks(
        self, *, limit: int, multiplier: int
    ) -> list[WinStreakEntry]:
        records = [record for record in await self.fighter_records() if record.fight_count > 0]
        candidates = select_candidate_pool(records, limit=limit, multiplier=multiplier)
        logger.debug(
            "Scanning win streaks for %d of %d fighters", len(candidates), len(records)
        )
        if not candidates:
            return []

        histories = await self._fight_histories(record.fighter_id for record in candidates)

        scored = [
            WinStreakEntry(
                fighter_id=record.fighter_id,
                fighter_name=record.fighter_name,
                fight_count=record.fight_count,
                longest_win_streak=longest_streak(
                    histories.get(record.fighter_id, ()), record.fighter_name
                ),
            )
            for record in candidates
        ]
        # Stable sort keeps the pool order (total wins, then name) for equal streaks.
        scored.sort(key=lambda entry: -entry.longest_win_streak)
        return scored[:limit]

    async def _fight_histories(
        self, fighter_ids: Iterable[int]
    ) -> dict[int, list[HistoryRow]]:
        """Load every fight for ``fighter_ids`` in one query, grouped per fighter."""

        unique_ids = list(dict.fromkeys(fighter_ids))
        if not unique_ids:
            return {}

        stmt = (
            select(
                FightStat.fighter_id,
                Fight.id,
                Fight.bout,
                Fight.outcome,
                Event.date,
            )
            .join(Fight, Fight.id == FightStat.fight_id)
            .join(Event, Event.id == Fight.event_id)
            .where(FightStat.fighter_id.in_(unique_ids))
            .distinct()
            .order_by(Event.date.asc(), Fight.id.asc())
        )
        result = await self._session.execute(stmt)

        histories: dict[int, list[HistoryRow]] = defaultdict(list)
        for fighter_id, fight_id, bout, outcome, event_date in result.all():
            histories[fighter_id].append((fight_id, bout, outcome, event_date))
        return histories

    async def _exact_win_streaks(self, *, limit: int) -> list[WinStreakEntry]:
        fighter_fights = (
            select(
                FightStat.fighter_id.label("fighter_id"),
                Fight.id.label("fight_id"),
                Event.date.label("event_date"),
                win_flag().label("is_win"),
            )
            .join(Fight, Fight.id == FightStat.fight_id)
            .join(Event, Event.id == Fight.event_id)
            .join(Fighter, Fighter.id == FightStat.fighter_id)
            .where(well_formed_outcome_clause())
            .where(well_formed_bout_clause())
            .distinct()
        ).subquery("fighter_fights")

        fight_order = (fighter_fights.c.event_date, fighter_fights.c.fight_id)
        ordered = (
            select(
                fighter_fights.c.fighter_id,
                fighter_fights.c.is_win,
                func.row_number()
                .over(partition_by=fighter_fights.c.fighter_id, order_by=fight_order)
                .label("row_number"),
                func.sum(fighter_fights.c.is_win)
                .over(partition_by=fighter_fights.c.fighter_id, order_by=fight_order)
                .label("wins_to_date"),
            )
        ).cte("ordered_fights")

        streak_groups = (
            select(
                ordered.c.fighter_id,
                func.count().label("streak_length"),
            )
            .where(ordered.c.is_win == 1)
            .group_by(
                ordered.c.fighter_id,
                ordered.c.row_number - ordered.c.wins_to_date,
            )
        ).cte("streak_groups")

        stmt = select(
            streak_groups.c.fighter_id,
            func.max(streak_groups.c.streak_length).label("longest_win_streak"),
        ).group_by(streak_groups.c.fighter_id)

        result = await self._session.execute(stmt)
        streaks = {row.fighter_id: int(row.longest_win_streak) for row in result.fetchall()}

        records = [record for record in await self.fighter_records() if record.fight_count > 0]
        records.sort(
            key=lambda record: (
                -streaks.get(record.fighter_id, 0),
                -record.total_wins,
                record.fighter_name,
            )
        )
        return [
            WinStreakEntry(
                fighter_id=record.fighter_id,
                fighter_name=record.fighter_name,
                fight_count=record.fight_count,
                longest_win_streak=streaks.get(record.fighter_id, 0),
            )
            for record in records[:limit]
        ]


__all__ = [
    "DEFAULT_POOL_MULTIPLIER",
    "WinStreakMixin",
    "longest_streak",
    "select_candidate_pool",
]
