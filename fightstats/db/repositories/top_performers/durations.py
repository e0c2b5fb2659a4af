"""Per-fight duration source shared by the rate and threshold calculations.

The ``fight_durations`` dataset holds one row per fight with the ending round
and the elapsed seconds of the whole fight.  When it is missing (SQLite, or a
PostgreSQL database where the view was never created) the same rows are
derived from ``fights`` on the fly, with identical filtering so both sources
produce the same numbers.
"""

from __future__ import annotations

from sqlalchemy import case, select
from sqlalchemy.sql.expression import ColumnElement, FromClause

from fightstats.db.models import Fight, FightStat, fight_durations
from fightstats.db.repositories.base import SECONDS_PER_ROUND, BaseRepository
from fightstats.db.repositories.sql_functions import clock_seconds


def derived_fight_durations() -> FromClause:
    """``fight_durations`` rebuilt from ``fights.round`` and ``fights.time``."""

    clock = clock_seconds(Fight.time)
    duration = case(
        (clock.isnot(None), (Fight.round - 1) * SECONDS_PER_ROUND + clock),
        else_=Fight.round * SECONDS_PER_ROUND,
    )
    return (
        select(
            Fight.id.label("fight_id"),
            Fight.round.label("ending_round"),
            duration.label("duration_seconds"),
        )
        .where(Fight.time.isnot(None))
        .where(Fight.time != "")
        .where(Fight.round.isnot(None))
    ).subquery("derived_fight_durations")


def round_seconds(durations: FromClause) -> ColumnElement[int]:
    """Seconds a ``fight_stats`` row contributes given its fight's duration row.

    Rounds before the ending round count in full, the ending round counts its
    elapsed clock and anything after it counts nothing.
    """

    ending_round = durations.c.ending_round
    return case(
        (FightStat.round < ending_round, SECONDS_PER_ROUND),
        (
            FightStat.round == ending_round,
            durations.c.duration_seconds - (ending_round - 1) * SECONDS_PER_ROUND,
        ),
        else_=0,
    )


class FightDurationsMixin(BaseRepository):
    """Resolve which duration source the current store offers."""

    async def _fight_durations_source(self) -> FromClause:
        if await self._supports_duration_view():
            return fight_durations
        return derived_fight_durations()


__all__ = ["FightDurationsMixin", "derived_fight_durations", "round_seconds"]
