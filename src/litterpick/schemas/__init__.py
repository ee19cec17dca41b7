"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .report import ClearResponse, ReportClear, ReportCreate, ReportResponse
from .score import LeaderboardEntryResponse, ScoreResponse
from .verification import VerificationCreate, VerificationResponse, VoteOutcome

__all__ = [
    "ClearResponse", "ReportClear", "ReportCreate", "ReportResponse",
    "LeaderboardEntryResponse", "ScoreResponse",
    "VerificationCreate", "VerificationResponse", "VoteOutcome",
]
