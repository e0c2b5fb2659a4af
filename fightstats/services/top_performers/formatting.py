"""Turn repository entries into the public leaderboard rows.

Each scope names its value keys after the category, e.g. ``total_knockdowns``
for career totals or ``max_takedowns`` for single-fight maximums.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fightstats.categories import (
    ACCURACY_PAIRS,
    AccuracyCategory,
    ResultsCategory,
    StatCategory,
)
from fightstats.schemas.top_performers import (
    AccuracyEntry,
    CareerTotalEntry,
    FightMaximumEntry,
    PerMinuteEntry,
    ResultsEntry,
    RoundMaximumEntry,
    WinStreakEntry,
)

Row = dict[str, Any]


def format_career(entries: Sequence[CareerTotalEntry], category: StatCategory) -> list[Row]:
    return [
        {
            "fighter_id": entry.fighter_id,
            "fighter_name": entry.fighter_name,
            "fight_count": entry.fight_count,
            f"total_{category.value}": entry.total,
        }
        for entry in entries
    ]


def _maximum_row(entry: FightMaximumEntry, category: StatCategory) -> Row:
    return {
        "fighter_id": entry.fighter_id,
        "fighter_name": entry.fighter_name,
        "fight_id": entry.fight_id,
        f"max_{category.value}": entry.value,
        "event_name": entry.event_name,
        "event_date": entry.event_date.isoformat() if entry.event_date else None,
        "opponent_name": entry.opponent_name,
    }


def format_fight(entries: Sequence[FightMaximumEntry], category: StatCategory) -> list[Row]:
    return [_maximum_row(entry, category) for entry in entries]


def format_round(entries: Sequence[RoundMaximumEntry], category: StatCategory) -> list[Row]:
    rows = []
    for entry in entries:
        row = _maximum_row(entry, category)
        row["round"] = entry.round
        rows.append(row)
    return rows


def format_per_minute(entries: Sequence[PerMinuteEntry], category: StatCategory) -> list[Row]:
    """Rates carry the elapsed time they were computed over."""

    return [
        {
            "fighter_id": entry.fighter_id,
            "fighter_name": entry.fighter_name,
            "fight_id": None,
            f"{category.value}_per_15_minutes": entry.rate_per_15_minutes,
            "fight_duration_minutes": round(entry.total_time_seconds / 60.0, 2),
            "total_fights": entry.total_fights,
            "total_time_seconds": entry.total_time_seconds,
            f"total_{category.value}": entry.total_statistic,
        }
        for entry in entries
    ]


def format_accuracy(entries: Sequence[AccuracyEntry], category: AccuracyCategory) -> list[Row]:
    pair = ACCURACY_PAIRS[category]
    return [
        {
            "fighter_id": entry.fighter_id,
            "fighter_name": entry.fighter_name,
            "fight_id": None,
            "accuracy_percentage": entry.accuracy_percentage,
            "total_fights": entry.total_fights,
            f"total_{pair.landed.value}": entry.total_landed,
            f"total_{pair.attempted.value}": entry.total_attempted,
        }
        for entry in entries
    ]


_RESULTS_FIELDS: dict[ResultsCategory, tuple[str, ...]] = {
    ResultsCategory.TOTAL_WINS: ("total_wins", "win_percentage"),
    ResultsCategory.TOTAL_LOSSES: ("total_losses", "win_percentage"),
    ResultsCategory.WIN_PERCENTAGE: ("total_wins", "total_losses", "win_percentage"),
}


def format_results(entries: Sequence[ResultsEntry], category: ResultsCategory) -> list[Row]:
    fields = _RESULTS_FIELDS[category]
    rows = []
    for entry in entries:
        row: Row = {
            "fighter_id": entry.fighter_id,
            "fighter_name": entry.fighter_name,
            "fight_count": entry.fight_count,
        }
        for field in fields:
            row[field] = getattr(entry, field)
        rows.append(row)
    return rows


def format_win_streaks(entries: Sequence[WinStreakEntry]) -> list[Row]:
    return [entry.model_dump() for entry in entries]


__all__ = [
    "format_accuracy",
    "format_career",
    "format_fight",
    "format_per_minute",
    "format_results",
    "format_round",
    "format_win_streaks",
]
