"""Top performers leaderboard aggregation over fight statistics."""

__version__ = "0.1.0"
