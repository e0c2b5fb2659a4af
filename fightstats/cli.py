"""Command line entry point for the top performers engine."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

from fightstats.cache import close_redis, get_cache_client, invalidate_win_streaks
from fightstats.categories import permitted_categories, permitted_scopes
from fightstats.db.connection import (
    dispose_engine,
    get_async_session_context,
    get_engine,
)
from fightstats.db.views import (
    create_fight_durations_view,
    create_schema,
    refresh_fight_durations,
)
from fightstats.errors import ParameterError
from fightstats.monitoring import query_stats
from fightstats.services.top_performers import get_top_performers_service
from fightstats.settings import configure_logging, get_settings

logger = logging.getLogger(__name__)

console = Console()
error_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fightstats", description="Top performers leaderboards"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    leaderboard = subparsers.add_parser(
        "leaderboard", help="Print the top ten fighters for a scope and category"
    )
    leaderboard.add_argument("scope", help=f"One of: {', '.join(permitted_scopes())}")
    leaderboard.add_argument("category", help="Category permitted for the scope")
    leaderboard.add_argument(
        "--table",
        action="store_true",
        help="Render a table instead of JSON",
    )
    threshold = leaderboard.add_mutually_exclusive_group()
    threshold.add_argument(
        "--threshold",
        dest="apply_threshold",
        action="store_true",
        default=None,
        help="Enforce the minimum attempts threshold (accuracy scope)",
    )
    threshold.add_argument(
        "--no-threshold",
        dest="apply_threshold",
        action="store_false",
        help="Skip the minimum attempts threshold (accuracy scope)",
    )

    categories = subparsers.add_parser("categories", help="List permitted categories")
    categories.add_argument("scope", nargs="?", help="Limit the listing to one scope")

    subparsers.add_parser(
        "init-db", help="Create tables and the fight_durations view (PostgreSQL)"
    )
    subparsers.add_parser("refresh-durations", help="Refresh the fight_durations view")
    subparsers.add_parser("invalidate-cache", help="Drop cached win streak leaderboards")
    return parser


def _print_error(exc: ParameterError) -> int:
    error_console.print_json(exc.to_response().model_dump_json())
    return 2


def _render_table(payload: dict[str, Any]) -> None:
    meta = payload["meta"]
    rows = payload["top_performers"]
    table = Table(title=f"Top performers: {meta['scope']} / {meta['category']}")
    if not rows:
        console.print(table)
        console.print("[yellow]No fighters qualify for this leaderboard.[/yellow]")
        return

    headers = list(rows[0])
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*("" if row[header] is None else str(row[header]) for header in headers))
    console.print(table)
    threshold = meta.get("minimum_attempts_threshold")
    if threshold is not None:
        console.print(f"[bold]Minimum attempts threshold:[/bold] {threshold}")


async def _print_leaderboard(args: argparse.Namespace) -> int:
    settings = get_settings()
    cache = await get_cache_client(settings)
    async with get_async_session_context() as session:
        service = get_top_performers_service(session, cache=cache, settings=settings)
        try:
            response = await service.aggregate(
                args.scope, args.category, apply_threshold=args.apply_threshold
            )
        except ParameterError as exc:
            return _print_error(exc)

    stats = query_stats(get_engine())
    if stats is not None:
        logger.info(
            "Leaderboard computed with %d statements in %.3fs",
            stats.statements,
            stats.total_seconds,
        )

    payload = response.to_payload()
    if args.table:
        _render_table(payload)
    else:
        console.print_json(data=payload)
    return 0


def _print_categories(scope: str | None) -> int:
    scopes = [scope] if scope else list(permitted_scopes())
    try:
        listing = {name: list(permitted_categories(name)) for name in scopes}
    except ParameterError as exc:
        return _print_error(exc)
    console.print_json(data=listing)
    return 0


async def run(args: argparse.Namespace) -> int:
    if args.command == "categories":
        return _print_categories(args.scope)

    try:
        if args.command == "leaderboard":
            return await _print_leaderboard(args)
        if args.command == "init-db":
            engine = get_engine()
            await create_schema(engine)
            if await create_fight_durations_view(engine):
                console.print("[green]Created fight_durations view[/green]")
            console.print("[green]Database schema ready[/green]")
            return 0
        if args.command == "refresh-durations":
            refreshed = await refresh_fight_durations(get_engine())
            if refreshed:
                console.print("[green]Refreshed fight_durations view[/green]")
            else:
                console.print("[yellow]No fight_durations view to refresh[/yellow]")
            return 0
        if args.command == "invalidate-cache":
            await invalidate_win_streaks(await get_cache_client())
            console.print("[green]Cleared cached win streaks[/green]")
            return 0
    finally:
        await dispose_engine()
        await close_redis()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv``, configure logging and run the selected command."""

    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)
    for warning in settings.optional_config_warnings():
        logger.warning(warning)
    return asyncio.run(run(args))


__all__ = ["build_parser", "main", "run"]
