"""Integration tests for the accuracy and per-15-minutes leaderboards."""

from __future__ import annotations

import pytest
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.categories import AccuracyCategory, StatCategory
from fightstats.db.models import durations_metadata, fight_durations
from fightstats.db.repositories.top_performers import TopPerformersRepository
from fightstats.db.repositories.top_performers.durations import derived_fight_durations
from tests.support.factories import FightDataBuilder

SIG = {"significant_strikes": 80, "significant_strikes_attempted": 100}


async def _accuracy_fixture(builder: FightDataBuilder) -> None:
    """Alpha lands 80/100 in five fights, Bravo 10/20 in five, Charlie 4 fights only."""

    await builder.record("Alpha", ["W"] * 5, rounds=[SIG], ending_round=1, time="5:00")
    await builder.record(
        "Bravo",
        ["L"] * 5,
        rounds=[{"significant_strikes": 10, "significant_strikes_attempted": 20}],
        ending_round=1,
        time="5:00",
    )
    await builder.record(
        "Charlie",
        ["W"] * 4,
        rounds=[{"significant_strikes": 99, "significant_strikes_attempted": 100}],
        ending_round=1,
        time="5:00",
    )


@pytest.mark.asyncio
async def test_accuracy_over_career_totals(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Alpha", ["W"] * 5, rounds=[SIG])

    leaderboard = await TopPerformersRepository(session).accuracy_leaders(
        AccuracyCategory.SIGNIFICANT_STRIKE_ACCURACY
    )

    assert leaderboard.minimum_attempts_threshold is None
    (entry,) = leaderboard.entries
    assert entry.fighter_name == "Alpha"
    assert entry.accuracy_percentage == 80.0
    assert entry.total_fights == 5
    assert entry.total_landed == 400
    assert entry.total_attempted == 500


@pytest.mark.asyncio
async def test_accuracy_requires_five_fights_and_attempts(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await _accuracy_fixture(builder)
    await builder.record("Delta", ["W"] * 6, rounds=[{"takedowns": 0}])

    leaderboard = await TopPerformersRepository(session).accuracy_leaders(
        AccuracyCategory.SIGNIFICANT_STRIKE_ACCURACY
    )

    assert [(entry.fighter_name, entry.accuracy_percentage) for entry in leaderboard.entries] == [
        ("Alpha", 80.0),
        ("Bravo", 50.0),
    ]


@pytest.mark.asyncio
async def test_minimum_attempts_threshold_filters_low_volume(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await _accuracy_fixture(builder)
    repository = TopPerformersRepository(session)

    # (500 + 100 + 400) attempts over 14 fights of 300 seconds, scaled to 1500 s.
    threshold = await repository.minimum_attempts_threshold(
        AccuracyCategory.SIGNIFICANT_STRIKE_ACCURACY
    )
    assert threshold == 357

    leaderboard = await repository.accuracy_leaders(
        AccuracyCategory.SIGNIFICANT_STRIKE_ACCURACY, apply_threshold=True
    )
    assert leaderboard.minimum_attempts_threshold == 357
    assert [entry.fighter_name for entry in leaderboard.entries] == ["Alpha"]


@pytest.mark.asyncio
async def test_minimum_attempts_threshold_is_zero_without_data(session: AsyncSession) -> None:
    repository = TopPerformersRepository(session)

    assert await repository.minimum_attempts_threshold(AccuracyCategory.TAKEDOWN_ACCURACY) == 0


@pytest.mark.asyncio
async def test_per_minute_rate_uses_elapsed_time(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record(
        "Knockout Artist", ["W"] * 5, rounds=[{"knockdowns": 2}], ending_round=1, time="2:00"
    )

    (entry,) = await TopPerformersRepository(session).per_minute_rates(StatCategory.KNOCKDOWNS)

    assert entry.fighter_name == "Knockout Artist"
    assert entry.total_time_seconds == 600
    assert entry.total_statistic == 10
    assert entry.total_fights == 5
    assert entry.rate_per_15_minutes == 15.0


@pytest.mark.asyncio
async def test_per_minute_counts_full_rounds_before_the_ending_round(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    rounds = [{"takedowns": 1}, {"takedowns": 1}, {"takedowns": 1}]
    await builder.record("Wrestler", ["W"] * 4, rounds=rounds, ending_round=3, time="2:30")
    # An unparseable clock counts the ending round as a full round.
    await builder.record("Wrestler", ["W"], rounds=rounds, ending_round=3, time="N/A")

    (entry,) = await TopPerformersRepository(session).per_minute_rates(StatCategory.TAKEDOWNS)

    assert entry.total_time_seconds == 4 * 750 + 900
    assert entry.total_statistic == 15
    assert entry.rate_per_15_minutes == round(15 * 900 / 3900, 2)


@pytest.mark.asyncio
async def test_per_minute_excludes_fighters_below_five_fights(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Newcomer", ["W"] * 4, rounds=[{"knockdowns": 3}], ending_round=1, time="1:00")

    assert await TopPerformersRepository(session).per_minute_rates(StatCategory.KNOCKDOWNS) == []


@pytest.mark.asyncio
async def test_derived_durations_match_the_materialized_view_rows(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    rounds = [{"knockdowns": 1, "total_strikes": 10}, {"knockdowns": 0, "total_strikes": 12}]
    puncher = await builder.record(
        "Puncher", ["W", "L", "W", "W", "D"], rounds=rounds, ending_round=2, time="3:10"
    )
    grinder = await builder.record(
        "Grinder", ["W"] * 6, rounds=rounds + [{"total_strikes": 9}], ending_round=3, time="5:00"
    )
    unknown = await builder.record(
        "Unknown Clock", ["W"] * 5, rounds=rounds, ending_round=2, time="--"
    )
    await builder.record("No Time", ["W"] * 5, rounds=rounds, ending_round=2, time=None)

    # Rows the PostgreSQL view yields: one full round plus 3:10, three full
    # rounds, an unparseable clock counted as two full rounds; NULL time absent.
    view_rows = (
        [(fight.id, 2, 490) for fight in puncher]
        + [(fight.id, 3, 900) for fight in grinder]
        + [(fight.id, 2, 600) for fight in unknown]
    )

    source = derived_fight_durations()
    derived_rows = (
        await session.execute(
            select(source.c.fight_id, source.c.ending_round, source.c.duration_seconds)
        )
    ).all()
    assert sorted(tuple(row) for row in derived_rows) == sorted(view_rows)

    derived = await TopPerformersRepository(session, use_duration_view=False).per_minute_rates(
        StatCategory.TOTAL_STRIKES
    )
    assert [
        (entry.fighter_name, entry.total_fights, entry.total_time_seconds, entry.total_statistic)
        for entry in derived
    ] == [
        ("Puncher", 5, 2450, 110),
        ("Unknown Clock", 5, 3000, 110),
        ("Grinder", 6, 5400, 186),
    ]
    assert [entry.rate_per_15_minutes for entry in derived] == [40.41, 33.0, 31.0]

    await session.run_sync(
        lambda sync_session: durations_metadata.create_all(sync_session.connection())
    )
    await session.execute(
        insert(fight_durations),
        [
            {"fight_id": fight_id, "ending_round": ending_round, "duration_seconds": seconds}
            for fight_id, ending_round, seconds in view_rows
        ],
    )
    repository = TopPerformersRepository(session)
    assert await repository._supports_duration_view() is True

    assert await repository.per_minute_rates(StatCategory.TOTAL_STRIKES) == derived
