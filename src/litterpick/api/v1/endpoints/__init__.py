# src/litterpick/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .leaderboards import router as leaderboards_router
from .reports import router as reports_router
from .users import router as users_router
from .verifications import router as verifications_router

__all__ = [
    "leaderboards_router",
    "reports_router",
    "users_router",
    "verifications_router",
]
