"""Leaderboard endpoints."""

from fastapi import APIRouter, Query

from litterpick.api.v1.dependencies import SessionDep
from litterpick.schemas.score import LeaderboardEntryResponse
from litterpick.services.leaderboard import LeaderboardEntry, LeaderboardView

router = APIRouter(prefix="/leaderboards", tags=["leaderboards"])


@router.get("/", response_model=list[LeaderboardEntryResponse])
async def get_leaderboard(
    db: SessionDep,
    scope: str = Query("global", description="global, city or country"),
    period: str = Query("all_time", description="weekly, monthly or all_time"),
    region: str | None = Query(None, description="City or country name for scoped boards"),
    limit: int | None = Query(None, ge=1),
) -> list[LeaderboardEntry]:
    """Rank users by points for a scope and period."""
    return LeaderboardView(db).top_n(scope, period, limit, region=region)
