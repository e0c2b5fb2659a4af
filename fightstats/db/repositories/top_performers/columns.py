"""Category enum to ``fight_stats`` column mapping.

Aggregators receive enum members and look their column up here; the mapping is
built from the ORM attributes themselves so an enum member without a matching
column fails at import time rather than at query time.
"""

from __future__ import annotations

from typing import Final

from sqlalchemy.orm import InstrumentedAttribute

from fightstats.categories import (
    ACCURACY_PAIRS,
    AccuracyCategory,
    StatCategory,
)
from fightstats.db.models import FightStat

STAT_COLUMNS: Final[dict[StatCategory, InstrumentedAttribute[int | None]]] = {
    category: getattr(FightStat, category.value) for category in StatCategory
}


def stat_column(category: StatCategory) -> InstrumentedAttribute[int | None]:
    return STAT_COLUMNS[StatCategory(category)]


def accuracy_columns(
    category: AccuracyCategory,
) -> tuple[InstrumentedAttribute[int | None], InstrumentedAttribute[int | None]]:
    """Return the ``(landed, attempted)`` columns backing ``category``."""

    pair = ACCURACY_PAIRS[AccuracyCategory(category)]
    return STAT_COLUMNS[pair.landed], STAT_COLUMNS[pair.attempted]


__all__ = ["STAT_COLUMNS", "accuracy_columns", "stat_column"]
