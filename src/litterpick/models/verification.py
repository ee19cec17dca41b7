# src/litterpick/models/verification.py
"""Community verification votes on cleared reports."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from litterpick.db.session import Base
from litterpick.db.time import utcnow


class VerificationVote(Base):
    """One immutable vote per voter per report.

    Rows are only ever inserted; there is no edit or delete path.
    """

    __tablename__ = "verification_votes"
    __table_args__ = (
        Index("ix_verification_votes_voter_id", "voter_id"),
    )

    # Composite primary key prevents duplicate votes from the same user.
    report_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("litter_reports.id", ondelete="CASCADE"),
        primary_key=True,
    )
    voter_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    is_positive: Mapped[bool] = mapped_column(Boolean, nullable=False)
    # Required for negative votes; enforced by the ledger.
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
