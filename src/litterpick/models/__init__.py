# src/litterpick/models/__init__.py
"""SQLAlchemy models for the LitterPick core."""

from .report import LitterReport, ReportStatus
from .score import ScoreEvent, ScoreEventKind, UserScoreAggregate
from .user import User
from .verification import VerificationVote

__all__ = [
    "LitterReport", "ReportStatus",
    "ScoreEvent", "ScoreEventKind", "UserScoreAggregate",
    "User",
    "VerificationVote",
]
