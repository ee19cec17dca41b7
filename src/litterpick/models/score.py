# src/litterpick/models/score.py
"""Per-user score aggregates and the append-only score event log."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from litterpick.db.session import Base
from litterpick.db.time import utcnow


class ScoreEventKind(str, enum.Enum):
    """Lifecycle and verification events that feed the scoring engine."""

    REPORT_CREATED = "report_created"
    CLEARED = "cleared"
    VERIFIED = "verified"
    VERIFICATION_CAST = "verification_cast"


class UserScoreAggregate(Base):
    """Cached all-time totals for one user.

    Written only by the scoring engine. Concurrent writers are detected through
    ``version`` and lose with a stale-data error instead of overwriting.
    """

    __tablename__ = "user_score_aggregates"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_reports: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_clears: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_verifications: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Calendar date in UTC.
    last_cleared_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __mapper_args__ = {"version_id_col": version}


class ScoreEvent(Base):
    """Immutable record of points awarded to a user.

    The log is the source of truth for windowed leaderboards and for
    reconciling aggregates. ``(user_id, kind, report_id)`` is unique so a
    replayed transition cannot award twice.
    """

    __tablename__ = "score_events"
    __table_args__ = (
        UniqueConstraint("user_id", "kind", "report_id", name="uq_score_events_dedup"),
        Index("ix_score_events_created_at", "created_at"),
        Index("ix_score_events_user_time", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    kind: Mapped[ScoreEventKind] = mapped_column(
        Enum(
            ScoreEventKind,
            name="score_event_kind",
            native_enum=False,
            length=32,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    )
    report_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
