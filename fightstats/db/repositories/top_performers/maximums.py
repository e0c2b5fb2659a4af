"""Single-fight and single-round maximum leaderboards.

Both leaderboards rank first and enrich afterwards: the window function runs
over bare ``fight_stats`` rows, and only the surviving top entries are joined
to fighters, fights and events.  Opponents are resolved with one bulk query over
the selected fight ids.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import func, select

from fightstats.categories import StatCategory
from fightstats.db.models import Event, Fight, Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT, BaseRepository
from fightstats.db.repositories.top_performers.columns import stat_column
from fightstats.schemas.top_performers import FightMaximumEntry, RoundMaximumEntry


class MaximumsMixin(BaseRepository):
    """Best single-fight and single-round performances for a counter."""

    async def fight_maximums(
        self, category: StatCategory, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[FightMaximumEntry]:
        """Rank (fighter, fight) pairs by the counter summed over the fight's rounds."""

        column = stat_column(category)
        fight_total = func.sum(func.coalesce(column, 0))

        per_fight = (
            select(
                FightStat.fighter_id.label("fighter_id"),
                FightStat.fight_id.label("fight_id"),
                fight_total.label("value"),
            )
            .group_by(FightStat.fighter_id, FightStat.fight_id)
            .having(fight_total > 0)
        ).subquery("per_fight")

        ranked = (
            select(
                per_fight.c.fighter_id,
                per_fight.c.fight_id,
                per_fight.c.value,
                func.row_number()
                .over(
                    order_by=(
                        per_fight.c.value.desc(),
                        per_fight.c.fight_id.asc(),
                        per_fight.c.fighter_id.asc(),
                    )
                )
                .label("leaderboard_rank"),
            )
        ).subquery("ranked_fights")

        stmt = (
            select(
                ranked.c.fighter_id,
                ranked.c.fight_id,
                ranked.c.value,
                Fighter.name.label("fighter_name"),
                Event.name.label("event_name"),
                Event.date.label("event_date"),
            )
            .join(Fighter, Fighter.id == ranked.c.fighter_id)
            .join(Fight, Fight.id == ranked.c.fight_id)
            .outerjoin(Event, Event.id == Fight.event_id)
            .where(ranked.c.leaderboard_rank <= limit)
            .order_by(ranked.c.leaderboard_rank)
        )

        rows = (await self._session.execute(stmt)).fetchall()
        opponents = await self._opponent_names(row.fight_id for row in rows)

        return [
            FightMaximumEntry(
                fighter_id=row.fighter_id,
                fighter_name=row.fighter_name,
                fight_id=row.fight_id,
                value=int(row.value),
                opponent_name=_pick_opponent(opponents, row.fight_id, row.fighter_id),
                event_name=row.event_name,
                event_date=row.event_date,
            )
            for row in rows
        ]

    async def round_maximums(
        self, category: StatCategory, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[RoundMaximumEntry]:
        """Rank individual round rows by their stored counter value."""

        column = stat_column(category)

        ranked = (
            select(
                FightStat.fighter_id.label("fighter_id"),
                FightStat.fight_id.label("fight_id"),
                FightStat.round.label("round"),
                column.label("value"),
                func.row_number()
                .over(
                    order_by=(
                        column.desc(),
                        FightStat.fight_id.asc(),
                        FightStat.fighter_id.asc(),
                        FightStat.round.asc(),
                    )
                )
                .label("leaderboard_rank"),
            )
            .where(column.isnot(None))
            .where(column > 0)
        ).subquery("ranked_rounds")

        stmt = (
            select(
                ranked.c.fighter_id,
                ranked.c.fight_id,
                ranked.c.round,
                ranked.c.value,
                Fighter.name.label("fighter_name"),
                Event.name.label("event_name"),
                Event.date.label("event_date"),
            )
            .join(Fighter, Fighter.id == ranked.c.fighter_id)
            .join(Fight, Fight.id == ranked.c.fight_id)
            .outerjoin(Event, Event.id == Fight.event_id)
            .where(ranked.c.leaderboard_rank <= limit)
            .order_by(ranked.c.leaderboard_rank)
        )

        rows = (await self._session.execute(stmt)).fetchall()
        opponents = await self._opponent_names(row.fight_id for row in rows)

        return [
            RoundMaximumEntry(
                fighter_id=row.fighter_id,
                fighter_name=row.fighter_name,
                fight_id=row.fight_id,
                round=int(row.round),
                value=int(row.value),
                opponent_name=_pick_opponent(opponents, row.fight_id, row.fighter_id),
                event_name=row.event_name,
                event_date=row.event_date,
            )
            for row in rows
        ]

    async def _opponent_names(
        self, fight_ids: Iterable[int]
    ) -> dict[int, list[tuple[int, str]]]:
        """Map each fight id to the ``(fighter_id, name)`` pairs with stats on it."""

        unique_ids = list(dict.fromkeys(fight_ids))
        if not unique_ids:
            return {}

        stmt = (
            select(FightStat.fight_id, Fighter.id, Fighter.name)
            .join(Fighter, Fighter.id == FightStat.fighter_id)
            .where(FightStat.fight_id.in_(unique_ids))
            .distinct()
            .order_by(FightStat.fight_id, Fighter.name, Fighter.id)
        )
        result = await self._session.execute(stmt)

        participants: dict[int, list[tuple[int, str]]] = defaultdict(list)
        for fight_id, fighter_id, name in result.all():
            participants[fight_id].append((fighter_id, name))
        return participants


def _pick_opponent(
    participants: dict[int, list[tuple[int, str]]], fight_id: int, fighter_id: int
) -> str | None:
    for participant_id, name in participants.get(fight_id, ()):
        if participant_id != fighter_id:
            return name
    return None


__all__ = ["MaximumsMixin"]
