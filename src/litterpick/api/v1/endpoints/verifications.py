"""Verification vote endpoints."""

import uuid

from fastapi import APIRouter, status

from litterpick.api.v1.dependencies import CurrentActorDep, SessionDep
from litterpick.models import VerificationVote
from litterpick.schemas.verification import (
    VerificationCreate,
    VerificationResponse,
    VoteOutcome,
)
from litterpick.services.verification import VerificationLedger

router = APIRouter(prefix="/reports", tags=["verifications"])


@router.post(
    "/{report_id}/verifications",
    response_model=VoteOutcome,
    status_code=status.HTTP_201_CREATED,
)
async def verify_report(
    report_id: uuid.UUID,
    vote_data: VerificationCreate,
    current_actor: CurrentActorDep,
    db: SessionDep,
) -> VoteOutcome:
    """Confirm or dispute a cleared report."""
    result = VerificationLedger(db).cast_vote(
        report_id,
        current_actor,
        vote_data.is_positive,
        vote_data.comment,
    )
    return VoteOutcome(
        vote=VerificationResponse.model_validate(result.vote),
        report_status=result.report.status,
        verification_count_positive=result.report.verification_count_positive,
        verification_count_negative=result.report.verification_count_negative,
        points_awarded=result.points_awarded,
        reached_consensus=result.reached_consensus,
    )


@router.get("/{report_id}/verifications", response_model=list[VerificationResponse])
async def get_report_verifications(
    report_id: uuid.UUID,
    db: SessionDep,
) -> list[VerificationVote]:
    """List every vote cast on a report, newest first."""
    return VerificationLedger(db).list_votes(report_id)
