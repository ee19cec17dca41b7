"""Leaderboards derived from score aggregates and the score event log."""

from __future__ import annotations

import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from litterpick.core.errors import InvalidQuery
from litterpick.core.settings import Settings, settings
from litterpick.db.time import utcnow
from litterpick.models import ScoreEvent, User, UserScoreAggregate


class LeaderboardScope(str, enum.Enum):
    GLOBAL = "global"
    CITY = "city"
    COUNTRY = "country"


class LeaderboardWindow(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL_TIME = "all_time"


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: uuid.UUID
    display_name: str
    city: str | None
    country: str | None
    points: int
    total_clears: int
    current_streak: int


class LeaderboardView:
    """Read-only rankings; nothing here is cached between calls.

    All-time boards rank the cached aggregate. Weekly and monthly boards sum
    score events inside the window. Ties fall back to lifetime clears, then to
    the older account, then to the user id.
    """

    def __init__(
        self,
        session: Session,
        *,
        clock: Callable[[], datetime] = utcnow,
        config: Settings = settings,
    ) -> None:
        self.session = session
        self.clock = clock
        self.config = config

    def top_n(
        self,
        scope: LeaderboardScope | str = LeaderboardScope.GLOBAL,
        window: LeaderboardWindow | str = LeaderboardWindow.ALL_TIME,
        limit: int | None = None,
        *,
        region: str | None = None,
    ) -> list[LeaderboardEntry]:
        """Return the top ``limit`` users for a scope and time window.

        Args:
            scope: ``global``, ``city`` or ``country``.
            window: ``weekly``, ``monthly`` or ``all_time``.
            limit: Number of entries; defaults to ``LEADERBOARD_DEFAULT_LIMIT``.
            region: City or country name, required for the non-global scopes.

        Raises:
            InvalidQuery: On an unknown scope or window, a missing region, or a
                limit outside ``1..LEADERBOARD_MAX_LIMIT``.
        """
        scope = self._parse(LeaderboardScope, scope, "scope")
        window = self._parse(LeaderboardWindow, window, "period")
        if limit is None:
            limit = self.config.leaderboard_default_limit
        if not 1 <= limit <= self.config.leaderboard_max_limit:
            raise InvalidQuery(f"limit must be between 1 and {self.config.leaderboard_max_limit}")
        if scope is not LeaderboardScope.GLOBAL and not region:
            raise InvalidQuery(f"A {scope.value} name is required for this leaderboard")

        if window is LeaderboardWindow.ALL_TIME:
            stmt = self._all_time()
        else:
            stmt = self._windowed(self._window_start(window))

        if scope is LeaderboardScope.CITY:
            stmt = stmt.where(func.lower(User.city) == region.lower())
        elif scope is LeaderboardScope.COUNTRY:
            stmt = stmt.where(func.lower(User.country) == region.lower())

        rows = self.session.execute(stmt.limit(limit)).all()
        return [
            LeaderboardEntry(
                rank=position,
                user_id=row.user_id,
                display_name=row.display_name,
                city=row.city,
                country=row.country,
                points=int(row.points),
                total_clears=int(row.total_clears),
                current_streak=int(row.current_streak),
            )
            for position, row in enumerate(rows, start=1)
        ]

    def _window_start(self, window: LeaderboardWindow) -> datetime:
        days = (
            self.config.weekly_window_days
            if window is LeaderboardWindow.WEEKLY
            else self.config.monthly_window_days
        )
        return self.clock() - timedelta(days=days)

    def _all_time(self) -> Select:
        return (
            select(
                User.id.label("user_id"),
                User.display_name,
                User.city,
                User.country,
                UserScoreAggregate.total_points.label("points"),
                UserScoreAggregate.total_clears,
                UserScoreAggregate.current_streak,
            )
            .join(UserScoreAggregate, UserScoreAggregate.user_id == User.id)
            .order_by(
                UserScoreAggregate.total_points.desc(),
                UserScoreAggregate.total_clears.desc(),
                User.created_at.asc(),
                User.id.asc(),
            )
        )

    def _windowed(self, since: datetime) -> Select:
        points = func.coalesce(func.sum(ScoreEvent.points), 0).label("points")
        total_clears = func.coalesce(UserScoreAggregate.total_clears, 0).label("total_clears")
        current_streak = func.coalesce(UserScoreAggregate.current_streak, 0).label("current_streak")
        return (
            select(
                User.id.label("user_id"),
                User.display_name,
                User.city,
                User.country,
                points,
                total_clears,
                current_streak,
            )
            .join(ScoreEvent, ScoreEvent.user_id == User.id)
            .outerjoin(UserScoreAggregate, UserScoreAggregate.user_id == User.id)
            .where(ScoreEvent.created_at >= since)
            .group_by(
                User.id,
                User.display_name,
                User.city,
                User.country,
                User.created_at,
                UserScoreAggregate.total_clears,
                UserScoreAggregate.current_streak,
            )
            .order_by(points.desc(), total_clears.desc(), User.created_at.asc(), User.id.asc())
        )

    @staticmethod
    def _parse(enum_cls: type[enum.Enum], value: object, name: str):
        try:
            return enum_cls(value)
        except ValueError as exc:
            allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
            raise InvalidQuery(f"Invalid {name}. Use {allowed}") from exc
