# src/litterpick/schemas/score.py
"""Score and leaderboard Pydantic schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ScoreResponse(BaseModel):
    """Per-user aggregate statistics."""

    user_id: UUID
    total_points: int
    total_reports: int
    total_clears: int
    total_verifications: int
    current_streak: int
    longest_streak: int
    last_cleared_date: date | None

    model_config = ConfigDict(from_attributes=True)


class LeaderboardEntryResponse(BaseModel):
    """One ranked row of a leaderboard."""

    rank: int
    user_id: UUID
    display_name: str
    city: str | None
    country: str | None
    points: int
    total_clears: int
    current_streak: int

    model_config = ConfigDict(from_attributes=True)
