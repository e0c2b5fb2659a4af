"""Maintenance of the ``fight_durations`` materialized view.

The view is PostgreSQL only.  On other databases the helpers log and return
``False``; the per-minute and threshold calculations then derive the same rows
from ``fights`` at query time.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from fightstats.db.models import Base

logger = logging.getLogger(__name__)

FIGHT_DURATIONS_VIEW = "fight_durations"

_CREATE_VIEW_SQL = """
CREATE MATERIALIZED VIEW IF NOT EXISTS fight_durations AS
SELECT
    f.id AS fight_id,
    f.round AS ending_round,
    CASE
        WHEN f.time ~ '^[0-9]+:[0-9]+$' THEN
            ((f.round - 1) * 300)
            + CAST(SPLIT_PART(f.time, ':', 1) AS INTEGER) * 60
            + CAST(SPLIT_PART(f.time, ':', 2) AS INTEGER)
        ELSE f.round * 300
    END AS duration_seconds
FROM fights f
WHERE f.time IS NOT NULL AND f.time != '' AND f.round IS NOT NULL
"""

_CREATE_INDEX_SQL = (
    "CREATE UNIQUE INDEX IF NOT EXISTS ix_fight_durations_fight_id "
    "ON fight_durations (fight_id)"
)

_VIEW_EXISTS_SQL = (
    "SELECT 1 FROM pg_matviews "
    "WHERE schemaname = current_schema() AND matviewname = :name"
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the ORM tables when they are missing."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_fight_durations_view(engine: AsyncEngine) -> bool:
    """Create the view and its unique index; returns ``False`` off PostgreSQL."""

    if engine.dialect.name != "postgresql":
        logger.info(
            "Skipping %s view creation on %s", FIGHT_DURATIONS_VIEW, engine.dialect.name
        )
        return False

    async with engine.begin() as conn:
        await conn.execute(text(_CREATE_VIEW_SQL))
        await conn.execute(text(_CREATE_INDEX_SQL))
    logger.info("Created %s materialized view", FIGHT_DURATIONS_VIEW)
    return True


async def refresh_fight_durations(
    engine: AsyncEngine, *, concurrently: bool = True
) -> bool:
    """Refresh the view after an import; returns ``False`` when there is none.

    ``CONCURRENTLY`` keeps the view readable during the refresh and relies on
    the unique index created by :func:`create_fight_durations_view`.
    """

    if engine.dialect.name != "postgresql":
        logger.debug("No %s view to refresh on %s", FIGHT_DURATIONS_VIEW, engine.dialect.name)
        return False

    async with engine.begin() as conn:
        exists = await conn.execute(text(_VIEW_EXISTS_SQL), {"name": FIGHT_DURATIONS_VIEW})
        if exists.scalar_one_or_none() is None:
            logger.warning("%s view does not exist; nothing refreshed", FIGHT_DURATIONS_VIEW)
            return False
        mode = " CONCURRENTLY" if concurrently else ""
        await conn.execute(text(f"REFRESH MATERIALIZED VIEW{mode} {FIGHT_DURATIONS_VIEW}"))

    logger.info("Refreshed %s materialized view", FIGHT_DURATIONS_VIEW)
    return True


__all__ = [
    "FIGHT_DURATIONS_VIEW",
    "create_fight_durations_view",
    "create_schema",
    "refresh_fight_durations",
]
