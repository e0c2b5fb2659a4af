"""Positional parsing of bout and outcome strings.

A fight stores its participants as ``"<first> vs. <second>"`` and its result as
``"<token>/<token>"`` where each token belongs to the fighter at the same
position.  The helpers below exist twice: as plain Python functions used when
fights are already loaded in memory (win streak scans) and as SQL expressions
used inside grouped queries (win/loss counts).  Both follow the same rules:

* the first half is everything before the first ``" vs"``;
* the second half is the remainder with surrounding dots and spaces removed;
* both halves, and the fighter name they are compared with, have whitespace
  runs collapsed, and a bout with an empty half matches nobody;
* an outcome is usable only when it splits into exactly two non-empty tokens,
  compared case-insensitively.

On SQLite the SQL side calls the Python functions themselves, registered with
:func:`install_sqlite_functions`.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final, Literal

from sqlalchemy import Engine, and_, case, event, or_
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.sql import ColumnElement

from fightstats.db.models import Fight, Fighter, normalize_name
from fightstats.db.repositories.sql_functions import (
    first_bout_name,
    first_outcome_token,
    normalized_name,
    second_bout_name,
    second_outcome_token,
)
from fightstats.errors import MalformedFightRecord

BOUT_SEPARATOR: Final = " vs"
WIN_TOKEN: Final = "W"
LOSS_TOKEN: Final = "L"

FightResult = Literal["win", "loss", "other"]


def split_bout(bout: str | None, *, fight_id: object = None) -> tuple[str, str]:
    """Return the two fighter names of ``bout`` in positional order."""

    if not bout or BOUT_SEPARATOR not in bout:
        raise MalformedFightRecord(fight_id, f"bout {bout!r} does not name two fighters")
    first, _, remainder = bout.partition(BOUT_SEPARATOR)
    first_name = normalize_name(first) or ""
    second_name = normalize_name(remainder.strip(". ")) or ""
    if not first_name or not second_name:
        raise MalformedFightRecord(fight_id, f"bout {bout!r} has an empty side")
    return first_name, second_name


def outcome_tokens(outcome: str | None, *, fight_id: object = None) -> tuple[str, str]:
    """Split ``outcome`` into its two positional tokens."""

    tokens = [token.strip().upper() for token in (outcome or "").split("/")]
    if len(tokens) != 2 or not all(tokens):
        raise MalformedFightRecord(fight_id, f"outcome {outcome!r} is not two tokens")
    return tokens[0], tokens[1]


def fighter_position(bout: str | None, fighter_name: str, *, fight_id: object = None) -> int | None:
    """Return 0 or 1 for the side ``fighter_name`` occupies, ``None`` when unmatched."""

    first, second = split_bout(bout, fight_id=fight_id)
    name = normalize_name(fighter_name)
    if name == first:
        return 0
    if name == second:
        return 1
    return None


def result_for_fighter(
    bout: str | None,
    outcome: str | None,
    fighter_name: str,
    *,
    fight_id: object = None,
) -> FightResult:
    """Classify a fight from the perspective of ``fighter_name``.

    Raises :class:`MalformedFightRecord` when either string cannot be split
    into two positions.  A fighter who matches neither half gets ``"other"``.
    """

    tokens = outcome_tokens(outcome, fight_id=fight_id)
    position = fighter_position(bout, fighter_name, fight_id=fight_id)
    if position is None:
        return "other"
    token = tokens[position]
    if token == WIN_TOKEN:
        return "win"
    if token == LOSS_TOKEN:
        return "loss"
    return "other"


def _part_or_none(
    value: str | None, parse: Callable[..., tuple[str, str]], position: int
) -> str | None:
    try:
        return parse(value)[position]
    except MalformedFightRecord:
        return None


_SQLITE_FUNCTIONS: Final[dict[str, Callable[[str | None], str | None]]] = {
    normalized_name.sqlite_function: lambda value: normalize_name(value) or None,
    first_bout_name.sqlite_function: lambda bout: _part_or_none(bout, split_bout, 0),
    second_bout_name.sqlite_function: lambda bout: _part_or_none(bout, split_bout, 1),
    first_outcome_token.sqlite_function: lambda outcome: _part_or_none(
        outcome, outcome_tokens, 0
    ),
    second_outcome_token.sqlite_function: lambda outcome: _part_or_none(
        outcome, outcome_tokens, 1
    ),
}


def _register_sqlite_functions(dbapi_connection: Any, connection_record: Any) -> None:
    for name, function in _SQLITE_FUNCTIONS.items():
        dbapi_connection.create_function(name, 1, function)


def install_sqlite_functions(engine: AsyncEngine | Engine) -> None:
    """Register the bout and outcome parsers on every new SQLite connection.

    Other dialects compile the same elements to native SQL, so this is a no-op
    for them.
    """

    sync_engine = engine.sync_engine if isinstance(engine, AsyncEngine) else engine
    if sync_engine.dialect.name != "sqlite":
        return
    if not event.contains(sync_engine, "connect", _register_sqlite_functions):
        event.listen(sync_engine, "connect", _register_sqlite_functions)


# ---------------------------------------------------------------------------
# SQL counterparts
# ---------------------------------------------------------------------------


def first_position_clause() -> ColumnElement[bool]:
    """``fighters.name`` is the first half of ``fights.bout``."""

    return first_bout_name(Fight.bout) == normalized_name(Fighter.name)


def second_position_clause() -> ColumnElement[bool]:
    """``fighters.name`` is the second half and not also the first."""

    fighter = normalized_name(Fighter.name)
    return and_(
        second_bout_name(Fight.bout) == fighter,
        first_bout_name(Fight.bout) != fighter,
    )


def well_formed_bout_clause() -> ColumnElement[bool]:
    return first_bout_name(Fight.bout).is_not(None)


def well_formed_outcome_clause() -> ColumnElement[bool]:
    """Outcome holds exactly one slash with a token on each side."""

    return first_outcome_token(Fight.outcome).is_not(None)


def decided_outcome_clause() -> ColumnElement[bool]:
    """Outcome is a win for one side and a loss for the other."""

    first, second = first_outcome_token(Fight.outcome), second_outcome_token(Fight.outcome)
    return or_(
        and_(first == WIN_TOKEN, second == LOSS_TOKEN),
        and_(first == LOSS_TOKEN, second == WIN_TOKEN),
    )


def _holds_token(token: str) -> ColumnElement[bool]:
    return or_(
        and_(first_position_clause(), first_outcome_token(Fight.outcome) == token),
        and_(second_position_clause(), second_outcome_token(Fight.outcome) == token),
    )


def win_clause() -> ColumnElement[bool]:
    """The joined fighter holds the ``W`` token of the joined fight."""

    return _holds_token(WIN_TOKEN)


def loss_clause() -> ColumnElement[bool]:
    """The joined fighter holds the ``L`` token of the joined fight."""

    return _holds_token(LOSS_TOKEN)


def win_flag() -> ColumnElement[int]:
    return case((win_clause(), 1), else_=0)


__all__ = [
    "BOUT_SEPARATOR",
    "FightResult",
    "decided_outcome_clause",
    "fighter_position",
    "first_position_clause",
    "install_sqlite_functions",
    "loss_clause",
    "outcome_tokens",
    "result_for_fighter",
    "second_position_clause",
    "split_bout",
    "well_formed_bout_clause",
    "well_formed_outcome_clause",
    "win_clause",
    "win_flag",
]
