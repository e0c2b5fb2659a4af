"""Concrete top performers repository built from modular mixins."""

from __future__ import annotations

from fightstats.db.repositories.top_performers.accuracy import AccuracyMixin
from fightstats.db.repositories.top_performers.career import CareerTotalsMixin
from fightstats.db.repositories.top_performers.maximums import MaximumsMixin
from fightstats.db.repositories.top_performers.per_minute import PerMinuteMixin
from fightstats.db.repositories.top_performers.streaks import WinStreakMixin


class TopPerformersRepository(
    CareerTotalsMixin,
    MaximumsMixin,
    AccuracyMixin,
    PerMinuteMixin,
    WinStreakMixin,
):
    """Read-only leaderboard queries over the fight statistics tables."""


__all__ = ["TopPerformersRepository"]
