"""Base repository utilities shared by the top performers aggregators."""

from __future__ import annotations

import logging
from typing import Any, Final

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.db.models import fight_durations

logger = logging.getLogger(__name__)

TOP_PERFORMERS_LIMIT: Final = 10
SECONDS_PER_ROUND: Final = 300


class BaseRepository:
    """Base repository providing common functionality for all repositories."""

    def __init__(self, session: AsyncSession, *, use_duration_view: bool = True) -> None:
        self._session = session
        self._use_duration_view = use_duration_view
        self._duration_view_supported: bool | None = None

    async def _supports_duration_view(self) -> bool:
        """Check whether the ``fight_durations`` dataset exists in the store.

        PostgreSQL keeps it as a materialized view, which the inspector lists
        separately from tables.  The answer is cached for the lifetime of the
        repository instance.
        """

        if not self._use_duration_view:
            return False
        if self._duration_view_supported is not None:
            return self._duration_view_supported

        view_name = fight_durations.name

        def check(sync_session: Any) -> bool:
            connection = sync_session.connection()
            inspector = inspect(connection)
            if inspector.has_table(view_name):
                return True
            if connection.dialect.name == "postgresql":
                return view_name in inspector.get_materialized_view_names()
            return False

        self._duration_view_supported = await self._session.run_sync(check)
        if not self._duration_view_supported:
            logger.info(
                "fight_durations dataset not found; deriving durations from fights.time"
            )
        return self._duration_view_supported


__all__ = ["BaseRepository", "SECONDS_PER_ROUND", "TOP_PERFORMERS_LIMIT"]
