"""Statistic category registry.

Every leaderboard scope accepts a fixed, ordered set of category identifiers.
Callers hand in free text; :func:`validate_category` turns it into a member of
a closed enum or raises :class:`~fightstats.errors.InvalidCategory`.  Query
builders only ever receive enum members and resolve columns through the
mappings in :mod:`fightstats.db.repositories.top_performers.columns`, so no
caller-supplied string reaches SQL text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from fightstats.errors import InvalidCategory, InvalidScope, MissingParameter


class Scope(str, Enum):
    """Measurement basis of a leaderboard."""

    CAREER = "career"
    FIGHT = "fight"
    ROUND = "round"
    PER_MINUTE = "per_minute"
    ACCURACY = "accuracy"
    RESULTS = "results"


class StatCategory(str, Enum):
    """Raw per-round counters stored on ``fight_stats``."""

    KNOCKDOWNS = "knockdowns"
    SIGNIFICANT_STRIKES = "significant_strikes"
    SIGNIFICANT_STRIKES_ATTEMPTED = "significant_strikes_attempted"
    TOTAL_STRIKES = "total_strikes"
    TOTAL_STRIKES_ATTEMPTED = "total_strikes_attempted"
    HEAD_STRIKES = "head_strikes"
    HEAD_STRIKES_ATTEMPTED = "head_strikes_attempted"
    BODY_STRIKES = "body_strikes"
    BODY_STRIKES_ATTEMPTED = "body_strikes_attempted"
    LEG_STRIKES = "leg_strikes"
    LEG_STRIKES_ATTEMPTED = "leg_strikes_attempted"
    DISTANCE_STRIKES = "distance_strikes"
    DISTANCE_STRIKES_ATTEMPTED = "distance_strikes_attempted"
    CLINCH_STRIKES = "clinch_strikes"
    CLINCH_STRIKES_ATTEMPTED = "clinch_strikes_attempted"
    GROUND_STRIKES = "ground_strikes"
    GROUND_STRIKES_ATTEMPTED = "ground_strikes_attempted"
    TAKEDOWNS = "takedowns"
    TAKEDOWNS_ATTEMPTED = "takedowns_attempted"
    SUBMISSION_ATTEMPTS = "submission_attempts"
    REVERSALS = "reversals"
    CONTROL_TIME_SECONDS = "control_time_seconds"


class ResultsCategory(str, Enum):
    """Win/loss derived leaderboards."""

    TOTAL_WINS = "total_wins"
    TOTAL_LOSSES = "total_losses"
    WIN_PERCENTAGE = "win_percentage"
    LONGEST_WIN_STREAK = "longest_win_streak"


class AccuracyCategory(str, Enum):
    """Landed-over-attempted ratios."""

    SIGNIFICANT_STRIKE_ACCURACY = "significant_strike_accuracy"
    TOTAL_STRIKE_ACCURACY = "total_strike_accuracy"
    HEAD_STRIKE_ACCURACY = "head_strike_accuracy"
    BODY_STRIKE_ACCURACY = "body_strike_accuracy"
    LEG_STRIKE_ACCURACY = "leg_strike_accuracy"
    DISTANCE_STRIKE_ACCURACY = "distance_strike_accuracy"
    CLINCH_STRIKE_ACCURACY = "clinch_strike_accuracy"
    GROUND_STRIKE_ACCURACY = "ground_strike_accuracy"
    TAKEDOWN_ACCURACY = "takedown_accuracy"


@dataclass(frozen=True, slots=True)
class AccuracyPair:
    """Counter pair backing an accuracy category."""

    landed: StatCategory
    attempted: StatCategory


ACCURACY_PAIRS: Final[dict[AccuracyCategory, AccuracyPair]] = {
    AccuracyCategory.SIGNIFICANT_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.SIGNIFICANT_STRIKES, StatCategory.SIGNIFICANT_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.TOTAL_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.TOTAL_STRIKES, StatCategory.TOTAL_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.HEAD_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.HEAD_STRIKES, StatCategory.HEAD_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.BODY_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.BODY_STRIKES, StatCategory.BODY_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.LEG_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.LEG_STRIKES, StatCategory.LEG_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.DISTANCE_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.DISTANCE_STRIKES, StatCategory.DISTANCE_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.CLINCH_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.CLINCH_STRIKES, StatCategory.CLINCH_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.GROUND_STRIKE_ACCURACY: AccuracyPair(
        StatCategory.GROUND_STRIKES, StatCategory.GROUND_STRIKES_ATTEMPTED
    ),
    AccuracyCategory.TAKEDOWN_ACCURACY: AccuracyPair(
        StatCategory.TAKEDOWNS, StatCategory.TAKEDOWNS_ATTEMPTED
    ),
}

CategoryEnum = StatCategory | ResultsCategory | AccuracyCategory

SCOPE_CATEGORIES: Final[dict[Scope, type[Enum]]] = {
    Scope.CAREER: StatCategory,
    Scope.FIGHT: StatCategory,
    Scope.ROUND: StatCategory,
    Scope.PER_MINUTE: StatCategory,
    Scope.ACCURACY: AccuracyCategory,
    Scope.RESULTS: ResultsCategory,
}


def permitted_scopes() -> tuple[str, ...]:
    return tuple(scope.value for scope in Scope)


def permitted_categories(scope: Scope | str) -> tuple[str, ...]:
    """Return the ordered whitelist for ``scope``."""

    resolved = validate_scope(scope)
    return tuple(member.value for member in SCOPE_CATEGORIES[resolved])


def validate_scope(scope: object) -> Scope:
    """Resolve ``scope`` to a :class:`Scope` or raise a caller-facing error."""

    if isinstance(scope, Scope):
        return scope
    if scope is None or (isinstance(scope, str) and not scope.strip()):
        raise MissingParameter("scope", permitted=permitted_scopes())
    if not isinstance(scope, str):
        raise InvalidScope(scope, permitted_scopes())
    try:
        return Scope(scope)
    except ValueError:
        raise InvalidScope(scope, permitted_scopes()) from None


def validate_category(scope: Scope | str, category: object) -> CategoryEnum:
    """Return the enum member equal to ``category`` for ``scope``.

    Members are ``str`` subclasses, so the returned value compares equal to the
    validated input.  Lookup is by exact value: whitespace, casing variants and
    strings carrying statement separators are rejected like any other unknown
    text.
    """

    resolved_scope = validate_scope(scope)
    enum_type = SCOPE_CATEGORIES[resolved_scope]
    permitted = tuple(member.value for member in enum_type)

    if isinstance(category, enum_type):
        return category  # type: ignore[return-value]
    if category is None or (isinstance(category, str) and not category.strip()):
        raise MissingParameter("category", permitted=permitted)
    if not isinstance(category, str):
        raise InvalidCategory(category, permitted, scope=resolved_scope.value)
    try:
        return enum_type(category)  # type: ignore[return-value]
    except ValueError:
        raise InvalidCategory(category, permitted, scope=resolved_scope.value) from None


def validate(scope: Scope | str, category: object) -> str:
    """Return ``category`` unchanged when it is permitted for ``scope``."""

    return validate_category(scope, category).value


__all__ = [
    "ACCURACY_PAIRS",
    "AccuracyCategory",
    "AccuracyPair",
    "CategoryEnum",
    "ResultsCategory",
    "SCOPE_CATEGORIES",
    "Scope",
    "StatCategory",
    "permitted_categories",
    "permitted_scopes",
    "validate",
    "validate_category",
    "validate_scope",
]
