"""Business logic services for the LitterPick core."""

from .leaderboard import LeaderboardScope, LeaderboardView, LeaderboardWindow
from .lifecycle import ClearResult, ReportLifecycle
from .scoring import ScoringEngine
from .spatial import GeoPoint, HaversineSpatialIndex, SpatialIndex
from .verification import VerificationLedger, VoteResult

__all__ = [
    "ClearResult",
    "GeoPoint",
    "HaversineSpatialIndex",
    "LeaderboardScope",
    "LeaderboardView",
    "LeaderboardWindow",
    "ReportLifecycle",
    "ScoringEngine",
    "SpatialIndex",
    "VerificationLedger",
    "VoteResult",
]
