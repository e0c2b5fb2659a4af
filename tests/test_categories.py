"""Unit tests for the statistic category registry."""

from __future__ import annotations

import pytest

from fightstats.categories import (
    ACCURACY_PAIRS,
    AccuracyCategory,
    ResultsCategory,
    Scope,
    StatCategory,
    permitted_categories,
    permitted_scopes,
    validate,
    validate_category,
    validate_scope,
)
from fightstats.db.repositories.top_performers.columns import STAT_COLUMNS
from fightstats.errors import InvalidCategory, InvalidScope, MissingParameter
from fightstats.schemas.error import ErrorType


def test_permitted_category_counts_per_scope() -> None:
    for scope in ("career", "fight", "round", "per_minute"):
        assert len(permitted_categories(scope)) == 22
    assert len(permitted_categories("accuracy")) == 9
    assert permitted_categories("results") == (
        "total_wins",
        "total_losses",
        "win_percentage",
        "longest_win_streak",
    )


def test_validate_returns_category_unchanged() -> None:
    assert validate("career", "knockdowns") == "knockdowns"
    assert validate_category(Scope.ACCURACY, "takedown_accuracy") is (
        AccuracyCategory.TAKEDOWN_ACCURACY
    )
    assert validate_category("results", "longest_win_streak") is (
        ResultsCategory.LONGEST_WIN_STREAK
    )


def test_unknown_category_lists_permitted_values() -> None:
    with pytest.raises(InvalidCategory) as excinfo:
        validate("fight", "punches")

    error = excinfo.value
    assert error.value == "punches"
    assert error.permitted == permitted_categories("fight")
    assert "knockdowns" in str(error)


@pytest.mark.parametrize(
    "candidate",
    [
        "knockdowns; DROP TABLE fighters",
        "knockdowns--",
        " knockdowns",
        "KNOCKDOWNS",
        "total_wins",
    ],
)
def test_category_lookalikes_are_rejected(candidate: str) -> None:
    with pytest.raises(InvalidCategory):
        validate("career", candidate)


def test_category_from_other_scope_is_rejected() -> None:
    with pytest.raises(InvalidCategory):
        validate("results", "knockdowns")
    with pytest.raises(InvalidCategory):
        validate("accuracy", "significant_strikes")


@pytest.mark.parametrize("missing", [None, "", "   "])
def test_missing_category(missing: object) -> None:
    with pytest.raises(MissingParameter) as excinfo:
        validate("career", missing)
    assert excinfo.value.name == "category"
    assert excinfo.value.permitted == permitted_categories("career")


def test_invalid_and_missing_scope() -> None:
    with pytest.raises(InvalidScope) as excinfo:
        validate_scope("season")
    assert excinfo.value.permitted == permitted_scopes()

    with pytest.raises(MissingParameter):
        validate_scope(None)


def test_validation_errors_are_value_errors_with_structured_response() -> None:
    with pytest.raises(ValueError):
        validate("round", "elbows")

    try:
        validate("round", "elbows")
    except InvalidCategory as exc:
        response = exc.to_response()
    assert response.error_type == ErrorType.INVALID_CATEGORY
    assert response.value == "elbows"
    assert "reversals" in response.permitted_values


def test_every_counter_maps_to_a_column() -> None:
    assert set(STAT_COLUMNS) == set(StatCategory)
    for category, column in STAT_COLUMNS.items():
        assert column.key == category.value


def test_accuracy_pairs_cover_every_accuracy_category() -> None:
    assert set(ACCURACY_PAIRS) == set(AccuracyCategory)
    for pair in ACCURACY_PAIRS.values():
        assert pair.attempted.value == f"{pair.landed.value}_attempted"
