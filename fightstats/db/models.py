from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)


def normalize_name(value: str | None) -> str | None:
    """Collapse runs of whitespace so names compare equal to bout halves."""

    if value is None:
        return None
    return " ".join(value.split())


class Base(DeclarativeBase):
    pass


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    location: Mapped[str | None]
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    fights: Mapped[list[Fight]] = relationship("Fight", back_populates="event")


class Fighter(Base):
    __tablename__ = "fighters"
    __table_args__ = (Index("ix_fighters_name_id", "name", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    height_in_inches: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reach_in_inches: Mapped[int | None] = mapped_column(Integer, nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    fight_stats: Mapped[list[FightStat]] = relationship(
        "FightStat", back_populates="fighter"
    )

    @validates("name")
    def validate_name(self, key: str, value: str) -> str:
        """Store names whitespace-normalized; bout matching depends on it."""
        normalized = normalize_name(value)
        if not normalized:
            raise ValueError("Fighter name must not be blank")
        return normalized


class Fight(Base):
    __tablename__ = "fights"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[int] = mapped_column(
        ForeignKey("events.id"), nullable=False, index=True
    )
    bout: Mapped[str] = mapped_column(
        String,
        nullable=False,
        doc="Both fighter names joined by ' vs. '; order matches the outcome tokens.",
    )
    outcome: Mapped[str] = mapped_column(
        String,
        nullable=False,
        doc="Slash-delimited result tokens (W, L, D, NC), one per bout position.",
    )
    weight_class: Mapped[str | None]
    method: Mapped[str | None]
    round: Mapped[int | None] = mapped_column(
        Integer, nullable=True, doc="Round in which the fight ended."
    )
    time: Mapped[str | None] = mapped_column(
        String, nullable=True, doc="Elapsed time of the ending round as M:SS."
    )
    time_format: Mapped[str | None]
    referee: Mapped[str | None]
    details: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    event: Mapped[Event] = relationship("Event", back_populates="fights")
    fight_stats: Mapped[list[FightStat]] = relationship(
        "FightStat", back_populates="fight"
    )


class FightStat(Base):
    __tablename__ = "fight_stats"
    __table_args__ = (
        Index("ix_fight_stats_fighter_id_fight_id", "fighter_id", "fight_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    fight_id: Mapped[int] = mapped_column(
        ForeignKey("fights.id"), nullable=False, index=True
    )
    fighter_id: Mapped[int] = mapped_column(
        ForeignKey("fighters.id"), nullable=False, index=True
    )
    round: Mapped[int] = mapped_column(Integer, nullable=False)

    knockdowns: Mapped[int | None]
    significant_strikes: Mapped[int | None]
    significant_strikes_attempted: Mapped[int | None]
    total_strikes: Mapped[int | None]
    total_strikes_attempted: Mapped[int | None]
    head_strikes: Mapped[int | None]
    head_strikes_attempted: Mapped[int | None]
    body_strikes: Mapped[int | None]
    body_strikes_attempted: Mapped[int | None]
    leg_strikes: Mapped[int | None]
    leg_strikes_attempted: Mapped[int | None]
    distance_strikes: Mapped[int | None]
    distance_strikes_attempted: Mapped[int | None]
    clinch_strikes: Mapped[int | None]
    clinch_strikes_attempted: Mapped[int | None]
    ground_strikes: Mapped[int | None]
    ground_strikes_attempted: Mapped[int | None]
    takedowns: Mapped[int | None]
    takedowns_attempted: Mapped[int | None]
    submission_attempts: Mapped[int | None]
    reversals: Mapped[int | None]
    control_time_seconds: Mapped[int | None]

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    fight: Mapped[Fight] = relationship("Fight", back_populates="fight_stats")
    fighter: Mapped[Fighter] = relationship("Fighter", back_populates="fight_stats")


# The duration dataset is a PostgreSQL materialized view maintained out of band,
# so it lives on its own metadata and is never emitted by ``Base.metadata``.
durations_metadata = MetaData()

fight_durations = Table(
    "fight_durations",
    durations_metadata,
    Column("fight_id", Integer, primary_key=True),
    Column("ending_round", Integer, nullable=True),
    Column("duration_seconds", Integer, nullable=True),
)


__all__ = [
    "Base",
    "Event",
    "Fight",
    "FightStat",
    "Fighter",
    "durations_metadata",
    "fight_durations",
    "normalize_name",
]
