# src/litterpick/models/report.py
"""Litter reports and the status values they move through."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from litterpick.db.session import Base
from litterpick.db.time import utcnow


class ReportStatus(str, enum.Enum):
    """Closed set of report states."""

    PENDING = "pending"
    CLAIMED = "claimed"
    CLEARED = "cleared"
    VERIFIED = "verified"


# Every edge the lifecycle may take. Claimed -> Pending is the claim release.
ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.CLAIMED}),
    ReportStatus.CLAIMED: frozenset({ReportStatus.PENDING, ReportStatus.CLEARED}),
    ReportStatus.CLEARED: frozenset({ReportStatus.VERIFIED}),
    ReportStatus.VERIFIED: frozenset(),
}

# States whose vote counters may still move. New votes need CLEARED; a vote
# that passed its checks just before the report was verified still counts.
VOTABLE_STATUSES = (ReportStatus.CLEARED, ReportStatus.VERIFIED)


def is_allowed_transition(current: ReportStatus, target: ReportStatus) -> bool:
    """Return True when ``current -> target`` is an edge of the state machine."""
    return target in ALLOWED_TRANSITIONS[current]


class LitterReport(Base):
    """A reported litter location and its cleanup progress.

    Status, claim and clear fields change only through the report store's
    conditional update; ``version`` is bumped on every successful write.
    """

    __tablename__ = "litter_reports"
    __table_args__ = (
        CheckConstraint(
            "claimed_by IS NULL OR status IN ('claimed', 'cleared', 'verified')",
            name="ck_litter_reports_claim_status",
        ),
        CheckConstraint(
            "cleared_by IS NULL OR status IN ('cleared', 'verified')",
            name="ck_litter_reports_clear_status",
        ),
        CheckConstraint(
            "latitude BETWEEN -90 AND 90 AND longitude BETWEEN -180 AND 180",
            name="ck_litter_reports_coordinates",
        ),
        Index("ix_litter_reports_status", "status"),
        Index("ix_litter_reports_reporter_id", "reporter_id"),
        Index("ix_litter_reports_cleared_by", "cleared_by"),
        Index("ix_litter_reports_lat_lng", "latitude", "longitude"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_before: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[ReportStatus] = mapped_column(
        Enum(
            ReportStatus,
            name="report_status",
            native_enum=False,
            length=16,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    # Optimistic concurrency token.
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    claimed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cleared_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    cleared_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    photo_after: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Derived counters; never decremented.
    verification_count_positive: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    verification_count_negative: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
