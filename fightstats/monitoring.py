"""Statement timing for the aggregation engine.

Leaderboard queries scan the whole ``fight_stats`` table, so slow statements
are logged with their duration.  Every monitored engine also keeps a running
:class:`QueryStats` tally, which the CLI reports after each leaderboard and the
tests use to check that win streak scans stay at a fixed number of queries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any
from weakref import WeakKeyDictionary

from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

_STATEMENT_PREVIEW_CHARS = 500

_engine_stats: WeakKeyDictionary[Engine, QueryStats] = WeakKeyDictionary()


@dataclass
class QueryStats:
    """Counters for the statements executed on one engine."""

    statements: int = 0
    slow_statements: int = 0
    total_seconds: float = 0.0

    def reset(self) -> None:
        self.statements = 0
        self.slow_statements = 0
        self.total_seconds = 0.0


def _preview(statement: str) -> str:
    if len(statement) <= _STATEMENT_PREVIEW_CHARS:
        return statement
    return statement[:_STATEMENT_PREVIEW_CHARS] + "..."


def setup_query_monitoring(
    engine: Any,
    slow_query_threshold: float = 0.1,
) -> QueryStats | None:
    """Attach timing listeners to ``engine`` and return its statement tally.

    Args:
        engine: Async SQLAlchemy engine to monitor
        slow_query_threshold: Log queries slower than this many seconds (default: 0.1s = 100ms)
    """
    if not hasattr(engine, "sync_engine"):
        logger.warning("Engine does not have sync_engine attribute, skipping query monitoring")
        return None

    sync_engine = engine.sync_engine
    existing = _engine_stats.get(sync_engine)
    if existing is not None:
        return existing
    stats = QueryStats()
    _engine_stats[sync_engine] = stats

    @event.listens_for(sync_engine, "before_cursor_execute")
    def receive_before_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(sync_engine, "after_cursor_execute")
    def receive_after_cursor_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        elapsed = time.perf_counter() - conn.info["query_start_time"].pop()
        stats.statements += 1
        stats.total_seconds += elapsed

        if elapsed > slow_query_threshold:
            stats.slow_statements += 1
            logger.warning(
                f"Slow query detected ({elapsed:.3f}s): {_preview(statement)}",
                extra={
                    "duration_seconds": elapsed,
                    "query": statement,
                    "threshold_seconds": slow_query_threshold,
                },
            )

    logger.debug(
        f"Query monitoring enabled (slow query threshold: {slow_query_threshold}s)"
    )
    return stats


def query_stats(engine: Any) -> QueryStats | None:
    """Return the tally of a monitored engine, or ``None`` when unmonitored."""

    sync_engine = getattr(engine, "sync_engine", engine)
    return _engine_stats.get(sync_engine)


__all__ = ["QueryStats", "query_stats", "setup_query_monitoring"]
