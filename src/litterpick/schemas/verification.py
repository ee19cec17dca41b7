# src/litterpick/schemas/verification.py
"""Verification vote Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from litterpick.models.report import ReportStatus


class VerificationCreate(BaseModel):
    """Schema for casting a verification vote."""

    is_positive: bool = Field(..., description="True to confirm the clear, False to dispute it")
    comment: str | None = Field(None, max_length=1000, examples=["Good job!"])


class VerificationResponse(BaseModel):
    """Schema for a recorded vote."""

    report_id: UUID
    voter_id: UUID
    is_positive: bool
    comment: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VoteOutcome(BaseModel):
    """Result of casting a vote."""

    vote: VerificationResponse
    report_status: ReportStatus
    verification_count_positive: int
    verification_count_negative: int
    points_awarded: int
    reached_consensus: bool
