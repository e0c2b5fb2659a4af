"""Exception taxonomy raised by the aggregation engine.

Validation failures are caller-facing: they subclass :class:`ValueError` and
carry the offending value together with the permitted set so an outer layer can
render a useful message without re-deriving the whitelist.  Cache and record
level failures are internal and never escape an aggregation.
"""

from __future__ import annotations

from collections.abc import Iterable

from fightstats.schemas.error import ErrorResponse, ErrorType


class FightStatsError(Exception):
    """Base class for every error raised by :mod:`fightstats`."""


class ParameterError(FightStatsError, ValueError):
    """Caller-facing validation failure."""

    error_type: ErrorType = ErrorType.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        value: object = None,
        permitted: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.value = value
        self.permitted: tuple[str, ...] = tuple(permitted)

    def to_response(self) -> ErrorResponse:
        """Render the error as the structured payload shared with API consumers."""

        return ErrorResponse(
            error_type=self.error_type,
            message=self.message,
            detail=(
                f"Valid values are: {', '.join(self.permitted)}" if self.permitted else None
            ),
            value=None if self.value is None else str(self.value),
            permitted_values=list(self.permitted),
        )


class MissingParameter(ParameterError):
    """Raised when ``scope`` or ``category`` is absent or blank."""

    error_type = ErrorType.MISSING_PARAMETER

    def __init__(self, name: str, *, permitted: Iterable[str] = ()) -> None:
        super().__init__(f"{name} parameter is required", value=None, permitted=permitted)
        self.name = name


class InvalidScope(ParameterError):
    """Raised when the requested scope is not one of the known leaderboards."""

    error_type = ErrorType.INVALID_SCOPE

    def __init__(self, value: object, permitted: Iterable[str]) -> None:
        permitted = tuple(permitted)
        super().__init__(
            f"Invalid scope: {value}. Valid scopes are: {', '.join(permitted)}",
            value=value,
            permitted=permitted,
        )


class InvalidCategory(ParameterError):
    """Raised when a category is outside the whitelist of its scope."""

    error_type = ErrorType.INVALID_CATEGORY

    def __init__(self, value: object, permitted: Iterable[str], *, scope: str) -> None:
        permitted = tuple(permitted)
        super().__init__(
            f"Invalid category for {scope} scope: {value}. "
            f"Valid categories are: {', '.join(permitted)}",
            value=value,
            permitted=permitted,
        )
        self.scope = scope


class CacheUnavailable(FightStatsError):
    """Raised by cache clients when the backend cannot be reached.

    The caching layer catches it and computes results directly.
    """


class MalformedFightRecord(FightStatsError, ValueError):
    """Raised when a bout or outcome string cannot be split into two positions."""

    def __init__(self, fight_id: object, reason: str) -> None:
        super().__init__(f"Fight {fight_id}: {reason}")
        self.fight_id = fight_id
        self.reason = reason


__all__ = [
    "CacheUnavailable",
    "FightStatsError",
    "InvalidCategory",
    "InvalidScope",
    "MalformedFightRecord",
    "MissingParameter",
    "ParameterError",
]
