"""Win/loss leaderboards derived from bout and outcome strings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from sqlalchemy import Float, Select, case, cast, func, select

from fightstats.db.models import Fight, Fighter, FightStat
from fightstats.db.repositories.base import TOP_PERFORMERS_LIMIT, BaseRepository
from fightstats.db.repositories.fight_utils import (
    decided_outcome_clause,
    loss_clause,
    win_clause,
)
from fightstats.schemas.top_performers import ResultsEntry

MINIMUM_FIGHTS_FOR_PERCENTAGE: Final = 10


@dataclass(frozen=True, slots=True)
class FighterRecord:
    """Decided-fight tallies for one fighter."""

    fighter_id: int
    fighter_name: str
    fight_count: int
    total_wins: int
    total_losses: int

    @property
    def win_percentage(self) -> float:
        decided = self.total_wins + self.total_losses
        if decided == 0:
            return 0.0
        return round(100.0 * self.total_wins / decided, 1)


class ResultsMixin(BaseRepository):
    """Total wins, total losses and win percentage over decided fights.

    Only fights whose outcome is exactly ``W/L`` or ``L/W`` take part; the
    fighter's token is found by matching their name against the bout halves.
    """

    def _fighter_records_statement(self) -> Select:
        total_wins = func.count(func.distinct(case((win_clause(), Fight.id))))
        total_losses = func.count(func.distinct(case((loss_clause(), Fight.id))))
        return (
            select(
                Fighter.id.label("fighter_id"),
                Fighter.name.label("fighter_name"),
                func.count(func.distinct(Fight.id)).label("fight_count"),
                total_wins.label("total_wins"),
                total_losses.label("total_losses"),
            )
            .join(FightStat, FightStat.fighter_id == Fighter.id)
            .join(Fight, Fight.id == FightStat.fight_id)
            .where(decided_outcome_clause())
            .group_by(Fighter.id, Fighter.name)
        )

    async def _fetch_records(self, stmt: Select) -> list[FighterRecord]:
        result = await self._session.execute(stmt)
        return [
            FighterRecord(
                fighter_id=row.fighter_id,
                fighter_name=row.fighter_name,
                fight_count=int(row.fight_count),
                total_wins=int(row.total_wins),
                total_losses=int(row.total_losses),
            )
            for row in result.fetchall()
        ]

    async def fighter_records(self) -> list[FighterRecord]:
        """Tallies for every fighter with at least one decided fight."""

        return await self._fetch_records(self._fighter_records_statement())

    async def total_wins(self, *, limit: int = TOP_PERFORMERS_LIMIT) -> list[ResultsEntry]:
        stmt = self._fighter_records_statement().subquery("fighter_records")
        ranked = (
            select(stmt)
            .where(stmt.c.total_wins > 0)
            .order_by(stmt.c.total_wins.desc(), stmt.c.fighter_name.asc())
            .limit(limit)
        )
        records = await self._fetch_records(ranked)
        return [
            ResultsEntry(
                fighter_id=record.fighter_id,
                fighter_name=record.fighter_name,
                fight_count=record.fight_count,
                total_wins=record.total_wins,
                win_percentage=record.win_percentage,
            )
            for record in records
        ]

    async def total_losses(
        self, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[ResultsEntry]:
        stmt = self._fighter_records_statement().subquery("fighter_records")
        ranked = (
            select(stmt)
            .where(stmt.c.total_losses > 0)
            .order_by(stmt.c.total_losses.desc(), stmt.c.fighter_name.asc())
            .limit(limit)
        )
        records = await self._fetch_records(ranked)
        return [
            ResultsEntry(
                fighter_id=record.fighter_id,
                fighter_name=record.fighter_name,
                fight_count=record.fight_count,
                total_losses=record.total_losses,
                win_percentage=record.win_percentage,
            )
            for record in records
        ]

    async def win_percentages(
        self, *, limit: int = TOP_PERFORMERS_LIMIT
    ) -> list[ResultsEntry]:
        """Best win rates among fighters with at least ten decided fights."""

        stmt = self._fighter_records_statement().subquery("fighter_records")
        decided = stmt.c.total_wins + stmt.c.total_losses
        percentage = case(
            (decided > 0, cast(stmt.c.total_wins, Float) * 100.0 / decided),
            else_=0.0,
        )
        ranked = (
            select(stmt)
            .where(stmt.c.fight_count >= MINIMUM_FIGHTS_FOR_PERCENTAGE)
            .order_by(percentage.desc(), stmt.c.fighter_name.asc())
            .limit(limit)
        )
        records = await self._fetch_records(ranked)
        return [
            ResultsEntry(
                fighter_id=record.fighter_id,
                fighter_name=record.fighter_name,
                fight_count=record.fight_count,
                total_wins=record.total_wins,
                total_losses=record.total_losses,
                win_percentage=record.win_percentage,
            )
            for record in records
        ]


__all__ = ["FighterRecord", "MINIMUM_FIGHTS_FOR_PERCENTAGE", "ResultsMixin"]
