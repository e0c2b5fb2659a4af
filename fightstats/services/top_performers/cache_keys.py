"""Cache key builders and serialization helpers for the top performers service."""

from __future__ import annotations

from fightstats.cache import WIN_STREAKS_KEY
from fightstats.schemas.top_performers import WinStreakEntry

# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def serialize_win_streaks(entries: list[WinStreakEntry]) -> list[dict[str, object]]:
    return [entry.model_dump(mode="json") for entry in entries]


def deserialize_win_streaks(payload: object) -> list[WinStreakEntry]:
    """Deserialize a cached win streak blob into :class:`WinStreakEntry` rows."""

    if not isinstance(payload, list):
        raise TypeError("Expected cached win streaks payload to be a list")
    return [WinStreakEntry.model_validate(item) for item in payload]


# ---------------------------------------------------------------------------
# Cache key builders
# ---------------------------------------------------------------------------


def win_streaks_cache_key() -> str:
    """Only the all-fighters variant exists, so the key never varies."""

    return WIN_STREAKS_KEY


__all__ = [
    "deserialize_win_streaks",
    "serialize_win_streaks",
    "win_streaks_cache_key",
]
