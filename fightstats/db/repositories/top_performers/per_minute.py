"""Per-15-minutes rate leaderboard."""

from __future__ import annotations

from typing import Final

from sqlalchemy import func, select

from fightstats.categories import StatCategory
from fightstats.db.models import Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT
from fightstats.db.repositories.top_performers.columns import stat_column
from fightstats.db.repositories.top_performers.durations import (
    FightDurationsMixin,
    round_seconds,
)
from fightstats.schemas.top_performers import PerMinuteEntry

SECONDS_PER_15_MINUTES: Final = 900
MINIMUM_FIGHTS: Final = 5


class PerMinuteMixin(FightDurationsMixin):
    """Normalise a counter by the time a fighter actually spent fighting."""

    async def per_minute_rates(
        self, category: StatCategory, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[PerMinuteEntry]:
        column = stat_column(category)
        durations = await self._fight_durations_source()

        fight_count = func.count(func.distinct(FightStat.fight_id))
        total_time = func.sum(round_seconds(durations))
        total_statistic = func.sum(func.coalesce(column, 0))

        stmt = (
            select(
                Fighter.id.label("fighter_id"),
                Fighter.name.label("fighter_name"),
                fight_count.label("total_fights"),
                total_time.label("total_time_seconds"),
                total_statistic.label("total_statistic"),
            )
            .join(FightStat, FightStat.fighter_id == Fighter.id)
            .join(durations, durations.c.fight_id == FightStat.fight_id)
            .group_by(Fighter.id, Fighter.name)
            .having(fight_count >= MINIMUM_FIGHTS)
            .having(total_time > 0)
        )

        result = await self._session.execute(stmt)
        entries = []
        for row in result.fetchall():
            total_time_seconds = int(row.total_time_seconds)
            total = int(row.total_statistic or 0)
            entries.append(
                PerMinuteEntry(
                    fighter_id=row.fighter_id,
                    fighter_name=row.fighter_name,
                    total_fights=int(row.total_fights),
                    total_time_seconds=total_time_seconds,
                    total_statistic=total,
                    rate_per_15_minutes=round(
                        total * SECONDS_PER_15_MINUTES / total_time_seconds, 2
                    ),
                )
            )

        entries.sort(key=lambda entry: (-entry.rate_per_15_minutes, entry.fighter_name))
        return entries[:limit]


__all__ = ["MINIMUM_FIGHTS", "PerMinuteMixin", "SECONDS_PER_15_MINUTES"]
