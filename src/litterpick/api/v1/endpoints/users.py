"""User score endpoints."""

import uuid

from fastapi import APIRouter

from litterpick.api.v1.dependencies import SessionDep
from litterpick.core.errors import UserNotFound
from litterpick.models import User
from litterpick.schemas.score import ScoreResponse
from litterpick.services.scoring import ScoringEngine

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}/score", response_model=ScoreResponse)
async def get_user_score(user_id: uuid.UUID, db: SessionDep) -> ScoreResponse:
    """Get a user's aggregate statistics; users who never scored read as zeros."""
    if db.get(User, user_id) is None:
        raise UserNotFound()
    aggregate = ScoringEngine(db).get_aggregate(user_id)
    if aggregate is None:
        return ScoreResponse(
            user_id=user_id,
            total_points=0,
            total_reports=0,
            total_clears=0,
            total_verifications=0,
            current_streak=0,
            longest_streak=0,
            last_cleared_date=None,
        )
    return ScoreResponse.model_validate(aggregate)
