"""Report lifecycle endpoints."""

import uuid

from fastapi import APIRouter, status

from litterpick.api.v1.dependencies import CurrentActorDep, EmailVerifiedDep, SessionDep
from litterpick.models import LitterReport
from litterpick.repositories.report_repo import ReportStore
from litterpick.schemas.report import ClearResponse, ReportClear, ReportCreate, ReportResponse
from litterpick.services.lifecycle import ReportLifecycle

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("/", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    report_data: ReportCreate,
    current_actor: CurrentActorDep,
    email_verified: EmailVerifiedDep,
    db: SessionDep,
) -> LitterReport:
    """Submit a new litter report."""
    return ReportLifecycle(db).create_report(
        current_actor,
        report_data.latitude,
        report_data.longitude,
        description=report_data.description,
        photo_before=report_data.photo_before,
        email_verified=email_verified,
    )


@router.get("/mine", response_model=list[ReportResponse])
async def list_my_reports(current_actor: CurrentActorDep, db: SessionDep) -> list[LitterReport]:
    """List reports filed by the current user."""
    return ReportStore(db).list_by_reporter(current_actor)


@router.get("/cleared", response_model=list[ReportResponse])
async def list_my_clears(current_actor: CurrentActorDep, db: SessionDep) -> list[LitterReport]:
    """List reports the current user has cleared."""
    return ReportStore(db).list_cleared_by(current_actor)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(report_id: uuid.UUID, db: SessionDep) -> LitterReport:
    """Get a single report."""
    return ReportStore(db).get(report_id)


@router.post("/{report_id}/claim", response_model=ReportResponse)
async def claim_report(
    report_id: uuid.UUID,
    current_actor: CurrentActorDep,
    db: SessionDep,
) -> LitterReport:
    """Claim a pending report."""
    return ReportLifecycle(db).claim(report_id, current_actor)


@router.post("/{report_id}/clear", response_model=ClearResponse)
async def clear_report(
    report_id: uuid.UUID,
    clear_data: ReportClear,
    current_actor: CurrentActorDep,
    db: SessionDep,
) -> ClearResponse:
    """Mark a claimed report as cleared with an after photo."""
    result = ReportLifecycle(db).clear(report_id, current_actor, clear_data.photo_after)
    return ClearResponse(
        report=ReportResponse.model_validate(result.report),
        points_awarded=result.points_awarded,
    )


@router.post("/{report_id}/release", response_model=ReportResponse)
async def release_report(
    report_id: uuid.UUID,
    current_actor: CurrentActorDep,
    db: SessionDep,
) -> LitterReport:
    """Abandon a claim so someone else can pick the report up."""
    return ReportLifecycle(db).release_claim(report_id, current_actor)
