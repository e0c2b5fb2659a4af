"""Repository package for the statistics store.

Aggregators live in :mod:`fightstats.db.repositories.top_performers`; the
bout/outcome parsing and dialect helpers they share sit beside it.
"""

from fightstats.db.repositories.base import (
    SECONDS_PER_ROUND,
    TOP_PERFORMERS_LIMIT,
    BaseRepository,
)
from fightstats.db.repositories.top_performers import TopPerformersRepository

__all__ = [
    "BaseRepository",
    "SECONDS_PER_ROUND",
    "TOP_PERFORMERS_LIMIT",
    "TopPerformersRepository",
]
