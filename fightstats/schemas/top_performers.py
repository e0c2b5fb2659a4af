"""Pydantic DTOs backing the top performers leaderboards."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field


# Repository level entries ---------------------------------------------------------------------
# Repositories return these typed rows. Category specific key names (``total_knockdowns``,
# ``max_takedowns`` ...) are only introduced when the service formats the public payload.
class CareerTotalEntry(BaseModel):
    """Career sum of one counter for one fighter."""

    fighter_id: int
    fighter_name: str
    fight_count: int
    total: int


class FightMaximumEntry(BaseModel):
    """Single-fight total of one counter, with opponent and event context."""

    fighter_id: int
    fighter_name: str
    fight_id: int
    value: int
    opponent_name: str | None = None
    event_name: str | None = None
    event_date: date | None = None


class RoundMaximumEntry(FightMaximumEntry):
    """Single-round value of one counter."""

    round: int


class AccuracyEntry(BaseModel):
    fighter_id: int
    fighter_name: str
    total_fights: int
    total_landed: int
    total_attempted: int
    accuracy_percentage: float


class AccuracyLeaderboard(BaseModel):
    """Accuracy entries plus the attempts threshold when one was enforced."""

    entries: list[AccuracyEntry] = Field(default_factory=list)
    minimum_attempts_threshold: int | None = None


class PerMinuteEntry(BaseModel):
    fighter_id: int
    fighter_name: str
    total_fights: int
    total_time_seconds: int
    total_statistic: int
    rate_per_15_minutes: float


class ResultsEntry(BaseModel):
    """Win/loss tallies; fields not relevant to a listing stay ``None``."""

    fighter_id: int
    fighter_name: str
    fight_count: int
    total_wins: int | None = None
    total_losses: int | None = None
    win_percentage: float | None = None


class WinStreakEntry(BaseModel):
    fighter_id: int
    fighter_name: str
    fight_count: int
    longest_win_streak: int


# Public response ------------------------------------------------------------------------------
class TopPerformersMeta(BaseModel):
    scope: str
    category: str
    minimum_attempts_threshold: int | None = None


class TopPerformersResponse(BaseModel):
    """Ordered leaderboard plus the parameters that produced it."""

    top_performers: list[dict[str, Any]] = Field(default_factory=list)
    meta: TopPerformersMeta

    def to_payload(self) -> dict[str, Any]:
        """Serialise for JSON consumers, omitting the threshold when not applied."""

        return {
            "top_performers": [dict(entry) for entry in self.top_performers],
            "meta": self.meta.model_dump(mode="json", exclude_none=True),
        }


__all__ = [
    "AccuracyEntry",
    "AccuracyLeaderboard",
    "CareerTotalEntry",
    "FightMaximumEntry",
    "PerMinuteEntry",
    "ResultsEntry",
    "RoundMaximumEntry",
    "TopPerformersMeta",
    "TopPerformersResponse",
    "WinStreakEntry",
]
