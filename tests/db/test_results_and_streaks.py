"""Integration tests for the win/loss leaderboards and longest win streaks."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.db.repositories.top_performers import TopPerformersRepository
from fightstats.db.repositories.top_performers.results import FighterRecord
from fightstats.db.repositories.top_performers.streaks import (
    longest_streak,
    select_candidate_pool,
)
from tests.support.factories import FightDataBuilder

MODES = ["candidate_pool", "exact"]


@pytest.mark.asyncio
async def test_total_wins_for_unbeaten_fighter(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Khabib Nurmagomedov", ["W"] * 4)

    (entry,) = await TopPerformersRepository(session).total_wins()

    assert entry.fighter_name == "Khabib Nurmagomedov"
    assert entry.total_wins == 4
    assert entry.fight_count == 4
    assert entry.win_percentage == 100.0
    assert entry.total_losses is None


@pytest.mark.asyncio
async def test_results_only_count_decided_fights(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Alpha", ["W", "W", "L", "D", "NC"])
    # Second bout position wins through the reversed outcome.
    await builder.fight("Bravo", "Charlie", outcome="L/W", first_rounds=[{}], second_rounds=[{}])

    repository = TopPerformersRepository(session)
    wins = await repository.total_wins()
    losses = await repository.total_losses()

    assert [(entry.fighter_name, entry.total_wins, entry.fight_count) for entry in wins] == [
        ("Alpha", 2, 3),
        ("Charlie", 1, 1),
    ]
    assert wins[0].win_percentage == 66.7
    # Fighters without a loss are left out of the loss listing.
    assert [(entry.fighter_name, entry.total_losses) for entry in losses] == [
        ("Alpha", 1),
        ("Bravo", 1),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("bout", "outcome"),
    [
        ("Hero  vs.  Opp", "L/W"),
        ("Hero vs. Opp ", "L/W"),
        ("Hero vs.Opp", "l/w"),
        ("  Hero vs. Opp", " L / W "),
    ],
)
async def test_irregular_bout_text_agrees_across_tallies_and_streak_modes(
    session: AsyncSession, builder: FightDataBuilder, bout: str, outcome: str
) -> None:
    await builder.fight(
        "Hero", "Opp", bout=bout, outcome=outcome, first_rounds=[{}], second_rounds=[{}]
    )
    repository = TopPerformersRepository(session)

    wins = await repository.total_wins()
    assert [(entry.fighter_name, entry.total_wins) for entry in wins] == [("Opp", 1)]
    for mode in MODES:
        streaks = await repository.longest_win_streaks(mode=mode)
        assert [(entry.fighter_name, entry.longest_win_streak) for entry in streaks] == [
            ("Opp", 1),
            ("Hero", 0),
        ], mode


@pytest.mark.asyncio
async def test_win_percentage_requires_ten_decided_fights(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Seventy", ["W"] * 7 + ["L"] * 3)
    await builder.record("Fifty", ["W", "L"] * 5)
    await builder.record("Almost", ["W"] * 9 + ["D"])

    entries = await TopPerformersRepository(session).win_percentages()

    assert [(entry.fighter_name, entry.win_percentage) for entry in entries] == [
        ("Seventy", 70.0),
        ("Fifty", 50.0),
    ]
    assert entries[0].total_wins == 7
    assert entries[0].total_losses == 3


def test_win_percentage_of_record_without_decisions() -> None:
    record = FighterRecord(
        fighter_id=1, fighter_name="Nobody", fight_count=0, total_wins=0, total_losses=0
    )
    assert record.win_percentage == 0.0


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", MODES)
async def test_draw_breaks_the_streak(
    session: AsyncSession, builder: FightDataBuilder, mode: str
) -> None:
    await builder.record("Hero", ["W", "W", "W", "D", "W", "W"])

    (entry,) = await TopPerformersRepository(session).longest_win_streaks(mode=mode)

    assert entry.fighter_name == "Hero"
    assert entry.longest_win_streak == 3
    assert entry.fight_count == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", MODES)
async def test_streak_leader_need_not_lead_total_wins(
    session: AsyncSession, builder: FightDataBuilder, mode: str
) -> None:
    await builder.record("Alpha", ["W", "W", "L", "W", "W", "L", "W", "W"])
    await builder.record("Bravo", ["W", "W", "W", "W", "L"])

    entries = await TopPerformersRepository(session).longest_win_streaks(mode=mode)

    assert [(entry.fighter_name, entry.longest_win_streak) for entry in entries] == [
        ("Bravo", 4),
        ("Alpha", 2),
    ]


@pytest.mark.asyncio
async def test_candidate_pool_only_scans_top_total_wins(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.record("Alpha", ["W", "W", "L", "W", "W", "L", "W", "W"])
    await builder.record("Bravo", ["W", "W", "W", "W", "L"])
    repository = TopPerformersRepository(session)

    pooled = await repository.longest_win_streaks(mode="candidate_pool", pool_multiplier=1, limit=1)
    exact = await repository.longest_win_streaks(mode="exact", limit=1)

    assert [(entry.fighter_name, entry.longest_win_streak) for entry in pooled] == [("Alpha", 2)]
    assert [(entry.fighter_name, entry.longest_win_streak) for entry in exact] == [("Bravo", 4)]


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", MODES)
async def test_malformed_outcome_is_skipped(
    session: AsyncSession, builder: FightDataBuilder, mode: str
) -> None:
    await builder.record("Hero", ["W", "W"])
    await builder.fight("Hero", "Opponent X", outcome="W", first_rounds=[{}])
    await builder.record("Hero", ["W"])

    (entry,) = await TopPerformersRepository(session).longest_win_streaks(mode=mode)

    assert entry.longest_win_streak == 3


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", MODES)
async def test_unmatched_bout_name_resets_the_streak(
    session: AsyncSession, builder: FightDataBuilder, mode: str
) -> None:
    await builder.record("Hero", ["W", "W"])
    await builder.fight(
        "Hero",
        "Opponent Y",
        bout="Somebody Else vs. Opponent Y",
        first_rounds=[{}],
    )
    await builder.record("Hero", ["W"])

    (entry,) = await TopPerformersRepository(session).longest_win_streaks(mode=mode)

    assert entry.longest_win_streak == 2


def test_longest_streak_scans_in_memory_history() -> None:
    history = [
        (1, "Hero vs. A", "W/L", None),
        (2, "B vs Hero", "L/W", None),
        (3, "Hero vs. C", "W/", None),
        (4, "Hero vs. D", "W/L", None),
        (5, "E vs. Hero", "W/L", None),
        (6, "Hero vs. F", "W/L", None),
    ]
    assert longest_streak(history, "Hero") == 3
    assert longest_streak([], "Hero") == 0


def test_select_candidate_pool_orders_by_wins_then_name() -> None:
    records = [
        FighterRecord(1, "Charlie", 5, 3, 2),
        FighterRecord(2, "Alpha", 5, 3, 2),
        FighterRecord(3, "Bravo", 6, 5, 1),
        FighterRecord(4, "Delta", 1, 1, 0),
    ]

    pool = select_candidate_pool(records, limit=1, multiplier=3)

    assert [record.fighter_name for record in pool] == ["Bravo", "Alpha", "Charlie"]
    assert len(select_candidate_pool(records, limit=10, multiplier=10)) == 4
