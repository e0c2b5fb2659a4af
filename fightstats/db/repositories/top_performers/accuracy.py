"""Accuracy leaderboard and its minimum attempts threshold."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from sqlalchemy import Float, cast, func, select

from fightstats.categories import AccuracyCategory
from fightstats.db.models import Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT
from fightstats.db.repositories.top_performers.columns import accuracy_columns
from fightstats.db.repositories.top_performers.durations import FightDurationsMixin
from fightstats.schemas.top_performers import AccuracyEntry, AccuracyLeaderboard

MINIMUM_FIGHTS: Final = 5
# Five full rounds.
FULL_FIGHT_SECONDS: Final = 1500


class AccuracyMixin(FightDurationsMixin):
    """Landed-over-attempted percentages across a fighter's whole record."""

    async def accuracy_leaders(
        self,
        category: AccuracyCategory,
        *,
        apply_threshold: bool = False,
        limit: int = TOP_PERFORMERS_LIMIT,
    ) -> AccuracyLeaderboard:
        """Rank fighters with at least five fights by accuracy for ``category``.

        With ``apply_threshold`` the fighters whose career attempts fall below
        :meth:`minimum_attempts_threshold` are dropped and the threshold is
        returned alongside the entries.
        """

        landed_column, attempted_column = accuracy_columns(category)
        total_fights = func.count(func.distinct(FightStat.fight_id))
        total_landed = func.sum(func.coalesce(landed_column, 0))
        total_attempted = func.sum(func.coalesce(attempted_column, 0))
        percentage = cast(total_landed, Float) * 100.0 / total_attempted

        stmt = (
            select(
                Fighter.id.label("fighter_id"),
                Fighter.name.label("fighter_name"),
                total_fights.label("total_fights"),
                total_landed.label("total_landed"),
                total_attempted.label("total_attempted"),
            )
            .join(FightStat, FightStat.fighter_id == Fighter.id)
            .group_by(Fighter.id, Fighter.name)
            .having(total_fights >= MINIMUM_FIGHTS)
            .having(total_attempted > 0)
        )

        threshold: int | None = None
        if apply_threshold:
            threshold = await self.minimum_attempts_threshold(category)
            stmt = stmt.having(total_attempted >= threshold)

        stmt = stmt.order_by(percentage.desc(), Fighter.name.asc(), Fighter.id.asc()).limit(
            limit
        )

        result = await self._session.execute(stmt)
        entries = [
            AccuracyEntry(
                fighter_id=row.fighter_id,
                fighter_name=row.fighter_name,
                total_fights=int(row.total_fights),
                total_landed=int(row.total_landed),
                total_attempted=int(row.total_attempted),
                accuracy_percentage=round(
                    100.0 * int(row.total_landed) / int(row.total_attempted), 2
                ),
            )
            for row in result.fetchall()
        ]
        return AccuracyLeaderboard(entries=entries, minimum_attempts_threshold=threshold)

    async def minimum_attempts_threshold(self, category: AccuracyCategory) -> int:
        """Average attempts a full five-round fight would produce for ``category``.

        The rate is total attempts over total seconds across every fight that
        has at least one attempt and a known duration.  Returns 0 without data.
        """

        _, attempted_column = accuracy_columns(category)
        durations = await self._fight_durations_source()
        attempts = func.sum(attempted_column)

        fight_attempts = (
            select(
                FightStat.fight_id.label("fight_id"),
                attempts.label("total_attempts"),
                durations.c.duration_seconds.label("duration_seconds"),
            )
            .join(durations, durations.c.fight_id == FightStat.fight_id)
            .group_by(FightStat.fight_id, durations.c.duration_seconds)
            .having(attempts > 0)
        ).subquery("fight_attempts")

        stmt = select(
            func.sum(fight_attempts.c.total_attempts),
            func.sum(fight_attempts.c.duration_seconds),
        )
        total_attempts, total_seconds = (await self._session.execute(stmt)).one()
        if not total_attempts or not total_seconds:
            return 0

        estimate = Decimal(int(total_attempts)) * FULL_FIGHT_SECONDS / Decimal(int(total_seconds))
        return int(estimate.quantize(Decimal(1), rounding=ROUND_HALF_UP))


__all__ = ["AccuracyMixin", "FULL_FIGHT_SECONDS", "MINIMUM_FIGHTS"]
