"""Service exposing the top performers leaderboards with cached win streaks."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.cache import CacheBackend
from fightstats.categories import (
    AccuracyCategory,
    ResultsCategory,
    Scope,
    StatCategory,
    validate_category,
    validate_scope,
)
from fightstats.db.repositories.top_performers import TopPerformersRepository
from fightstats.schemas.top_performers import (
    TopPerformersMeta,
    TopPerformersResponse,
    WinStreakEntry,
)
from fightstats.services.caching import CacheableService, cached
from fightstats.services.top_performers.cache_keys import (
    deserialize_win_streaks,
    serialize_win_streaks,
    win_streaks_cache_key,
)
from fightstats.services.top_performers.formatting import (
    format_accuracy,
    format_career,
    format_fight,
    format_per_minute,
    format_results,
    format_round,
    format_win_streaks,
)
from fightstats.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)


class TopPerformersService(CacheableService):
    """Validate leaderboard requests and dispatch them to the repository.

    Validation happens before any repository call, so unknown scopes and
    categories never reach the database.
    """

    def __init__(
        self,
        repository: TopPerformersRepository,
        *,
        cache: CacheBackend | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        super().__init__(cache=cache)
        self._repository = repository
        self._settings = settings or get_settings()

    async def aggregate(
        self,
        scope: object,
        category: object,
        *,
        apply_threshold: bool | None = None,
    ) -> TopPerformersResponse:
        """Return the top ten fighters for ``category`` within ``scope``.

        ``apply_threshold`` only affects the accuracy scope; ``None`` uses the
        configured default.
        """

        resolved_scope = validate_scope(scope)
        resolved_category = validate_category(resolved_scope, category)
        meta = TopPerformersMeta(scope=resolved_scope.value, category=resolved_category.value)

        rows: list[dict[str, Any]]
        if resolved_scope is Scope.CAREER:
            stat = StatCategory(resolved_category)
            rows = format_career(await self._repository.career_totals(stat), stat)
        elif resolved_scope is Scope.FIGHT:
            stat = StatCategory(resolved_category)
            rows = format_fight(await self._repository.fight_maximums(stat), stat)
        elif resolved_scope is Scope.ROUND:
            stat = StatCategory(resolved_category)
            rows = format_round(await self._repository.round_maximums(stat), stat)
        elif resolved_scope is Scope.PER_MINUTE:
            stat = StatCategory(resolved_category)
            rows = format_per_minute(await self._repository.per_minute_rates(stat), stat)
        elif resolved_scope is Scope.ACCURACY:
            accuracy = AccuracyCategory(resolved_category)
            if apply_threshold is None:
                apply_threshold = self._settings.accuracy_apply_threshold
            leaderboard = await self._repository.accuracy_leaders(
                accuracy, apply_threshold=apply_threshold
            )
            rows = format_accuracy(leaderboard.entries, accuracy)
            meta.minimum_attempts_threshold = leaderboard.minimum_attempts_threshold
        else:
            rows = await self._results_rows(ResultsCategory(resolved_category))

        return TopPerformersResponse(top_performers=rows, meta=meta)

    async def _results_rows(self, category: ResultsCategory) -> list[dict[str, Any]]:
        if category is ResultsCategory.TOTAL_WINS:
            entries = await self._repository.total_wins()
        elif category is ResultsCategory.TOTAL_LOSSES:
            entries = await self._repository.total_losses()
        elif category is ResultsCategory.WIN_PERCENTAGE:
            entries = await self._repository.win_percentages()
        else:
            return format_win_streaks(await self.longest_win_streaks())
        return format_results(entries, category)

    @cached(
        lambda _self: win_streaks_cache_key(),
        ttl=lambda self: self._settings.win_streak_cache_ttl_seconds,
        encode=serialize_win_streaks,
        decode=deserialize_win_streaks,
    )
    async def longest_win_streaks(self) -> list[WinStreakEntry]:
        """Longest win streak leaderboard, cached as one blob for all callers."""

        return await self._repository.longest_win_streaks(
            mode=self._settings.win_streak_mode,
            pool_multiplier=self._settings.win_streak_pool_multiplier,
        )


def get_top_performers_service(
    session: AsyncSession,
    *,
    cache: CacheBackend | None = None,
    settings: AppSettings | None = None,
) -> TopPerformersService:
    """Wire a repository bound to ``session`` into a :class:`TopPerformersService`."""

    resolved = settings or get_settings()
    repository = TopPerformersRepository(
        session, use_duration_view=resolved.use_fight_durations_view
    )
    return TopPerformersService(repository, cache=cache, settings=resolved)


__all__ = ["TopPerformersService", "get_top_performers_service"]
