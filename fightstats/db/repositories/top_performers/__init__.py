"""Top performers repository package consolidating modular mixins."""

from __future__ import annotations

from fightstats.db.repositories.top_performers.repository import (
    TopPerformersRepository,
)

__all__ = ["TopPerformersRepository"]
