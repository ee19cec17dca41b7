# src/litterpick/models/user.py
"""Local projection of accounts owned by the external identity provider."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from litterpick.db.session import Base
from litterpick.db.time import utcnow


class User(Base):
    """Account known to the core.

    Identity and sessions live elsewhere; the core only needs a stable id, the
    location used for scoped leaderboards and the creation time used to break
    leaderboard ties.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
