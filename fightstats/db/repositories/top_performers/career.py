"""Career totals leaderboard."""

from __future__ import annotations

from sqlalchemy import func, select

from fightstats.categories import StatCategory
from fightstats.db.models import Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT, BaseRepository
from fightstats.db.repositories.top_performers.columns import stat_column
from fightstats.schemas.top_performers import CareerTotalEntry


class CareerTotalsMixin(BaseRepository):
    """Sum a counter across every round a fighter has on record."""

    async def career_totals(
        self, category: StatCategory, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[CareerTotalEntry]:
        column = stat_column(category)
        total = func.sum(func.coalesce(column, 0)).label("total")
        fight_count = func.count(func.distinct(FightStat.fight_id)).label("fight_count")

        stmt = (
            select(
                Fighter.id.label("fighter_id"),
                Fighter.name.label("fighter_name"),
                fight_count,
                total,
            )
            .join(FightStat, FightStat.fighter_id == Fighter.id)
            .group_by(Fighter.id, Fighter.name)
            .order_by(total.desc(), Fighter.name.asc(), Fighter.id.asc())
            .limit(limit)
        )

        result = await self._session.execute(stmt)
        return [
            CareerTotalEntry(
                fighter_id=row.fighter_id,
                fighter_name=row.fighter_name,
                fight_count=int(row.fight_count),
                total=int(row.total or 0),
            )
            for row in result.fetchall()
        ]


__all__ = ["CareerTotalsMixin"]
