from fightstats.schemas.error import ErrorResponse, ErrorType
from fightstats.schemas.top_performers import (
    AccuracyEntry,
    AccuracyLeaderboard,
    CareerTotalEntry,
    FightMaximumEntry,
    PerMinuteEntry,
    ResultsEntry,
    RoundMaximumEntry,
    TopPerformersMeta,
    TopPerformersResponse,
    WinStreakEntry,
)

__all__ = [
    "AccuracyEntry",
    "AccuracyLeaderboard",
    "CareerTotalEntry",
    "ErrorResponse",
    "ErrorType",
    "FightMaximumEntry",
    "PerMinuteEntry",
    "ResultsEntry",
    "RoundMaximumEntry",
    "TopPerformersMeta",
    "TopPerformersResponse",
    "WinStreakEntry",
]
