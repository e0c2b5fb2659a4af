"""Tests for bout/outcome parsing in Python and in SQL."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fightstats.db.models import Fight, Fighter, FightStat
from fightstats.db.repositories.fight_utils import (
    fighter_position,
    loss_clause,
    outcome_tokens,
    result_for_fighter,
    split_bout,
    win_clause,
)
from fightstats.db.repositories.sql_functions import (
    clock_seconds,
    first_bout_name,
    first_outcome_token,
    parse_clock,
    second_bout_name,
    second_outcome_token,
)
from fightstats.errors import MalformedFightRecord
from tests.support.factories import FightDataBuilder


def test_split_bout_handles_both_separators() -> None:
    assert split_bout("Jon Jones vs. Daniel Cormier") == ("Jon Jones", "Daniel Cormier")
    assert split_bout("Jon Jones vs Daniel Cormier") == ("Jon Jones", "Daniel Cormier")


@pytest.mark.parametrize("bout", [None, "", "Jon Jones", "Jon Jones vs. ", " vs. Cormier"])
def test_split_bout_rejects_one_sided_bouts(bout: str | None) -> None:
    with pytest.raises(MalformedFightRecord):
        split_bout(bout, fight_id=7)


@pytest.mark.parametrize("outcome", [None, "", "W", "W/L/D", "/L", "W/"])
def test_outcome_tokens_require_two_tokens(outcome: str | None) -> None:
    with pytest.raises(MalformedFightRecord):
        outcome_tokens(outcome)


def test_result_for_fighter_reads_positional_token() -> None:
    bout = "Amanda Nunes vs. Ronda Rousey"
    assert result_for_fighter(bout, "W/L", "Amanda Nunes") == "win"
    assert result_for_fighter(bout, "W/L", "Ronda Rousey") == "loss"
    assert result_for_fighter(bout, "L/W", "Ronda Rousey") == "win"
    assert result_for_fighter(bout, "D/D", "Amanda Nunes") == "other"
    assert result_for_fighter(bout, "NC/NC", "Ronda Rousey") == "other"


def test_unmatched_fighter_gets_no_position() -> None:
    bout = "Amanda Nunes vs. Ronda Rousey"
    assert fighter_position(bout, "Holly Holm") is None
    assert result_for_fighter(bout, "W/L", "Holly Holm") == "other"


def test_parse_clock() -> None:
    assert parse_clock("4:59") == 299
    assert parse_clock("0:30") == 30
    assert parse_clock("N/A") is None
    assert parse_clock("") is None
    assert parse_clock(None) is None


@pytest.mark.asyncio
async def test_clock_seconds_matches_python_twin(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    times = ["2:30", "0:05", "N/A", "1:2:3", "5:"]
    fights = [
        await builder.fight(f"Left {index}", f"Right {index}", time=value)
        for index, value in enumerate(times)
    ]

    result = await session.execute(
        select(Fight.time, clock_seconds(Fight.time)).where(
            Fight.id.in_([fight.id for fight in fights])
        )
    )
    for time_value, seconds in result.all():
        assert seconds == parse_clock(time_value)


@pytest.mark.asyncio
async def test_win_and_loss_clauses_follow_bout_positions(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    for first, second, outcome in (
        ("Alex Pereira", "Israel Adesanya", "W/L"),
        ("Israel Adesanya", "Alex Pereira", "W/L"),
        ("Alex Pereira", "Jan Blachowicz", "L/W"),
    ):
        await builder.fight(first, second, outcome=outcome, first_rounds=[{}], second_rounds=[{}])

    stmt = (
        select(Fighter.name, Fight.id, win_clause(), loss_clause())
        .join(FightStat, FightStat.fighter_id == Fighter.id)
        .join(Fight, Fight.id == FightStat.fight_id)
        .order_by(Fight.id, Fighter.name)
    )
    rows = (await session.execute(stmt)).all()

    outcomes = {(name, fight_id): (bool(win), bool(loss)) for name, fight_id, win, loss in rows}
    for (name, fight_id), (won, lost) in outcomes.items():
        fight = await session.get(Fight, fight_id)
        expected = result_for_fighter(fight.bout, fight.outcome, name)
        assert won == (expected == "win")
        assert lost == (expected == "loss")
    assert len(outcomes) == 6


def _python_halves(parse, value: str | None) -> tuple[str | None, str | None]:
    try:
        return parse(value)
    except MalformedFightRecord:
        return None, None


@pytest.mark.asyncio
async def test_sql_bout_and_outcome_halves_match_python(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    shapes = [
        ("Hero  vs.  Opp", "W/L"),
        ("Hero vs. Opp ", "l/w"),
        ("Hero vs.Opp", " D / D "),
        ("Hero vs. ", "W/L/D"),
        ("Hero and Opp", "/L"),
    ]
    for index, (bout, outcome) in enumerate(shapes):
        await builder.fight(f"Left {index}", f"Right {index}", bout=bout, outcome=outcome)

    rows = (
        await session.execute(
            select(
                Fight.bout,
                Fight.outcome,
                first_bout_name(Fight.bout),
                second_bout_name(Fight.bout),
                first_outcome_token(Fight.outcome),
                second_outcome_token(Fight.outcome),
            ).order_by(Fight.id)
        )
    ).all()

    assert len(rows) == len(shapes)
    for bout, outcome, first, second, first_token, second_token in rows:
        assert (first, second) == _python_halves(split_bout, bout)
        assert (first_token, second_token) == _python_halves(outcome_tokens, outcome)
    assert rows[0][2:4] == ("Hero", "Opp")
    assert rows[1][4:] == ("L", "W")


@pytest.mark.asyncio
async def test_name_matching_treats_wildcards_literally(
    session: AsyncSession, builder: FightDataBuilder
) -> None:
    await builder.fight(
        "Jose_Aldo",
        "Max Holloway",
        bout="JoseXAldo vs. Max Holloway",
        outcome="W/L",
        first_rounds=[{}],
        second_rounds=[{}],
    )
    await builder.fight(
        "100% Heart",
        "Brian Ortega",
        bout="100 Percent Heart vs. Brian Ortega",
        outcome="W/L",
        first_rounds=[{}],
        second_rounds=[{}],
    )

    stmt = (
        select(Fighter.name, win_clause(), loss_clause())
        .join(FightStat, FightStat.fighter_id == Fighter.id)
        .join(Fight, Fight.id == FightStat.fight_id)
    )
    rows = (await session.execute(stmt)).all()
    flags = {name: (bool(won), bool(lost)) for name, won, lost in rows}

    assert flags["Jose_Aldo"] == (False, False)
    assert flags["100% Heart"] == (False, False)
    assert flags["Max Holloway"] == (False, True)
    assert flags["Brian Ortega"] == (False, True)
