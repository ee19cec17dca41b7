# src/litterpick/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    leaderboards_router,
    reports_router,
    users_router,
    verifications_router,
)

__all__ = [
    "leaderboards_router",
    "reports_router",
    "users_router",
    "verifications_router",
]
