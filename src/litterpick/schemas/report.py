# src/litterpick/schemas/report.py
"""Report-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from litterpick.models.report import ReportStatus


class ReportCreate(BaseModel):
    """Schema for submitting a new litter report."""

    latitude: float = Field(..., ge=-90, le=90, examples=[51.5074])
    longitude: float = Field(..., ge=-180, le=180, examples=[-0.1278])
    description: str | None = Field(
        None,
        max_length=2000,
        examples=["Plastic bottles near the park entrance"],
    )
    photo_before: str | None = Field(None, description="Reference to the stored before photo")


class ReportClear(BaseModel):
    """Schema for clearing a claimed report."""

    photo_after: str = Field(..., min_length=1, description="Reference to the stored after photo")


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    id: UUID
    reporter_id: UUID
    latitude: float
    longitude: float
    description: str | None
    photo_before: str | None
    status: ReportStatus
    claimed_by: UUID | None
    claimed_at: datetime | None
    cleared_by: UUID | None
    cleared_at: datetime | None
    photo_after: str | None
    verification_count_positive: int
    verification_count_negative: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClearResponse(BaseModel):
    """Cleared report plus the points the clearer earned."""

    report: ReportResponse
    points_awarded: int
