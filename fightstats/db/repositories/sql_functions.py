"""Dialect-aware SQL helpers.

``fights.time`` stores the elapsed time of the ending round as ``M:SS``.
PostgreSQL parses it with a regex guard and ``SPLIT_PART``; SQLite (used by the
test-suite and the local fallback database) has neither, so the same semantics
are expressed with ``GLOB``, ``instr`` and ``substr``.

The bout and outcome elements split ``fights.bout`` and ``fights.outcome`` into
their positional halves.  PostgreSQL evaluates them with string functions and
regular expressions.  SQLite calls Python functions registered on each
connection by :func:`fightstats.db.repositories.fight_utils.install_sqlite_functions`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Integer, String
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class clock_seconds(FunctionElement[int]):
    """Seconds encoded by an ``M:SS`` string, or NULL for any other shape."""

    type = Integer()
    inherit_cache = True
    name = "clock_seconds"


def _single_argument(element: FunctionElement[Any], compiler: Any, **kw: Any) -> str:
    (argument,) = list(element.clauses)
    return compiler.process(argument, **kw)


@compiles(clock_seconds)
@compiles(clock_seconds, "postgresql")
def _compile_clock_seconds_postgresql(
    element: clock_seconds, compiler: Any, **kw: Any
) -> str:
    text = _single_argument(element, compiler, **kw)
    return (
        f"CASE WHEN {text} ~ '^[0-9]+:[0-9]+$' THEN "
        f"CAST(SPLIT_PART({text}, ':', 1) AS INTEGER) * 60 + "
        f"CAST(SPLIT_PART({text}, ':', 2) AS INTEGER) "
        "ELSE NULL END"
    )


@compiles(clock_seconds, "sqlite")
def _compile_clock_seconds_sqlite(
    element: clock_seconds, compiler: Any, **kw: Any
) -> str:
    text = _single_argument(element, compiler, **kw)
    return (
        f"CASE WHEN {text} GLOB '[0-9]*:[0-9]*' "
        f"AND {text} NOT GLOB '*:' "
        f"AND {text} NOT GLOB '*[^0-9:]*' "
        f"AND {text} NOT GLOB '*:*:*' THEN "
        f"CAST(substr({text}, 1, instr({text}, ':') - 1) AS INTEGER) * 60 + "
        f"CAST(substr({text}, instr({text}, ':') + 1) AS INTEGER) "
        "ELSE NULL END"
    )


def parse_clock(value: str | None) -> int | None:
    """Python twin of :class:`clock_seconds` for values already in memory."""

    if not value:
        return None
    minutes, separator, seconds = value.partition(":")
    if not separator or not minutes.isdigit() or not seconds.isdigit():
        return None
    return int(minutes) * 60 + int(seconds)


class normalized_name(FunctionElement[str]):
    """Whitespace runs collapsed to one space and the ends trimmed; NULL when blank."""

    type = String()
    inherit_cache = True
    name = "normalized_name"
    sqlite_function = "fightstats_normalized_name"


class first_bout_name(FunctionElement[str]):
    """Normalized name before the first ``" vs"`` of a bout, NULL when malformed."""

    type = String()
    inherit_cache = True
    name = "first_bout_name"
    sqlite_function = "fightstats_first_bout_name"
    position = 0


class second_bout_name(FunctionElement[str]):
    """Normalized name after the first ``" vs"``, leading dots stripped."""

    type = String()
    inherit_cache = True
    name = "second_bout_name"
    sqlite_function = "fightstats_second_bout_name"
    position = 1


class first_outcome_token(FunctionElement[str]):
    """Upper-cased token before the slash of a two-token outcome, else NULL."""

    type = String()
    inherit_cache = True
    name = "first_outcome_token"
    sqlite_function = "fightstats_first_outcome_token"
    position = 0


class second_outcome_token(FunctionElement[str]):
    type = String()
    inherit_cache = True
    name = "second_outcome_token"
    sqlite_function = "fightstats_second_outcome_token"
    position = 1


BOUT_FUNCTIONS = (
    normalized_name,
    first_bout_name,
    second_bout_name,
    first_outcome_token,
    second_outcome_token,
)


def _collapse_whitespace_postgresql(text: str) -> str:
    return rf"NULLIF(BTRIM(REGEXP_REPLACE({text}, '\s+', ' ', 'g')), '')"


@compiles(normalized_name)
@compiles(normalized_name, "postgresql")
def _compile_normalized_name_postgresql(
    element: normalized_name, compiler: Any, **kw: Any
) -> str:
    return _collapse_whitespace_postgresql(_single_argument(element, compiler, **kw))


@compiles(first_bout_name)
@compiles(first_bout_name, "postgresql")
@compiles(second_bout_name)
@compiles(second_bout_name, "postgresql")
def _compile_bout_name_postgresql(
    element: first_bout_name | second_bout_name, compiler: Any, **kw: Any
) -> str:
    bout = _single_argument(element, compiler, **kw)
    separator = f"STRPOS({bout}, ' vs')"
    halves = (
        _collapse_whitespace_postgresql(f"SPLIT_PART({bout}, ' vs', 1)"),
        _collapse_whitespace_postgresql(f"BTRIM(SUBSTR({bout}, {separator} + 3), '. ')"),
    )
    return (
        f"CASE WHEN {separator} > 0 "
        f"AND {halves[0]} IS NOT NULL AND {halves[1]} IS NOT NULL "
        f"THEN {halves[element.position]} END"
    )


@compiles(first_outcome_token)
@compiles(first_outcome_token, "postgresql")
@compiles(second_outcome_token)
@compiles(second_outcome_token, "postgresql")
def _compile_outcome_token_postgresql(
    element: first_outcome_token | second_outcome_token, compiler: Any, **kw: Any
) -> str:
    outcome = _single_argument(element, compiler, **kw)
    tokens = tuple(
        rf"NULLIF(UPPER(REGEXP_REPLACE(SPLIT_PART({outcome}, '/', {part}), '^\s+|\s+$', '', 'g')), '')"
        for part in (1, 2)
    )
    return (
        f"CASE WHEN {outcome} ~ '^[^/]*/[^/]*$' "
        f"AND {tokens[0]} IS NOT NULL AND {tokens[1]} IS NOT NULL "
        f"THEN {tokens[element.position]} END"
    )


def _compile_registered_sqlite_function(
    element: FunctionElement[Any], compiler: Any, **kw: Any
) -> str:
    return f"{element.sqlite_function}({_single_argument(element, compiler, **kw)})"


for _element in BOUT_FUNCTIONS:
    compiles(_element, "sqlite")(_compile_registered_sqlite_function)


__all__ = [
    "BOUT_FUNCTIONS",
    "clock_seconds",
    "first_bout_name",
    "first_outcome_token",
    "normalized_name",
    "parse_clock",
    "second_bout_name",
    "second_outcome_token",
]
