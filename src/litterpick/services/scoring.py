"""Scoring engine: point awards, streaks and per-user aggregates.

All writes happen inside the caller's transaction. A lifecycle operation that
triggers a scoring event therefore commits the status change and the points
together, or neither.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from litterpick.core.errors import ConflictError, ReportNotFound
from litterpick.core.settings import Settings, settings
from litterpick.db.time import utcnow
from litterpick.models import LitterReport, ScoreEvent, ScoreEventKind, UserScoreAggregate
from litterpick.services.spatial import GeoPoint, HaversineSpatialIndex, SpatialIndex

logger = logging.getLogger(__name__)


def next_streak(last_cleared: date | None, current_streak: int, today: date) -> int:
    """Return the streak after a clear on ``today``.

    Same day keeps the streak, the following day extends it, anything else
    (a gap, a first clear, a clock running backwards) starts over at 1.
    """
    if last_cleared is None:
        return 1
    days = (today - last_cleared).days
    if days == 0:
        return max(current_streak, 1)
    if days == 1:
        return current_streak + 1
    return 1


def streaks_from_dates(dates: Iterable[date]) -> tuple[int, int, date | None]:
    """Replay clear dates and return ``(current_streak, longest_streak, last_date)``."""
    current = longest = 0
    last: date | None = None
    for day in sorted(set(dates)):
        current = next_streak(last, current, day)
        longest = max(longest, current)
        last = day
    return current, longest, last


@dataclass(frozen=True)
class ClearAward:
    """Breakdown of points for a single clear."""

    base: int
    streak_bonus: int
    first_in_area_bonus: int
    streak: int

    @property
    def total(self) -> int:
        return self.base + self.streak_bonus + self.first_in_area_bonus


class ScoringEngine:
    """Apply scoring events to the event log and the cached aggregates."""

    def __init__(
        self,
        session: Session,
        spatial_index: SpatialIndex | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        config: Settings = settings,
    ) -> None:
        self.session = session
        self.spatial_index = spatial_index or HaversineSpatialIndex(session)
        self.clock = clock
        self.config = config

    def apply_event(
        self,
        kind: ScoreEventKind,
        user_id: uuid.UUID,
        report_id: uuid.UUID | None = None,
    ) -> int:
        """Award the points for one event and return how many were granted.

        A second delivery of the same ``(kind, user_id, report_id)`` is a no-op
        returning 0.

        Raises:
            ConflictError: If another writer updated the aggregate concurrently.
        """
        kind = ScoreEventKind(kind)
        if report_id is not None and self._already_applied(kind, user_id, report_id):
            logger.info("Skipping duplicate %s event for user %s on report %s",
                        kind.value, user_id, report_id)
            return 0

        now = self.clock()
        aggregate = self._lock_aggregate(user_id, now)

        if kind is ScoreEventKind.CLEARED:
            award = self._clear_award(aggregate, report_id, now)
            points = award.total
            aggregate.total_clears += 1
            aggregate.current_streak = award.streak
            aggregate.longest_streak = max(aggregate.longest_streak, award.streak)
            aggregate.last_cleared_date = now.date()
        elif kind is ScoreEventKind.VERIFIED:
            points = self.config.verified_report_bonus
        elif kind is ScoreEventKind.VERIFICATION_CAST:
            points = self.config.verification_bonus
            aggregate.total_verifications += 1
        elif kind is ScoreEventKind.REPORT_CREATED:
            points = self.config.report_created_points
            aggregate.total_reports += 1
        else:  # pragma: no cover - exhaustive over ScoreEventKind
            raise ValueError(f"Unknown score event kind: {kind!r}")

        aggregate.total_points += points
        aggregate.updated_at = now
        self.session.add(
            ScoreEvent(
                user_id=user_id,
                points=points,
                kind=kind,
                report_id=report_id,
                created_at=now,
            )
        )
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning("Concurrent aggregate update for user %s", user_id)
            raise ConflictError() from exc

        logger.info("Awarded %d points to %s for %s", points, user_id, kind.value)
        return points

    def get_aggregate(self, user_id: uuid.UUID) -> UserScoreAggregate | None:
        """Return the cached aggregate for a user, if they have ever scored."""
        result = self.session.execute(
            select(UserScoreAggregate)
            .where(UserScoreAggregate.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def total_clears(self, user_id: uuid.UUID) -> int:
        """Lifetime clears from the cached aggregate; 0 for users who never scored."""
        aggregate = self.get_aggregate(user_id)
        return aggregate.total_clears if aggregate else 0

    def can_verify(self, user_id: uuid.UUID) -> bool:
        """Return True when the user has cleared enough reports to verify others."""
        return self.total_clears(user_id) >= self.config.min_clears_to_verify

    def logged_points(self, user_id: uuid.UUID) -> int:
        """Sum of the user's points according to the event log."""
        total = self.session.execute(
            select(func.coalesce(func.sum(ScoreEvent.points), 0))
            .where(ScoreEvent.user_id == user_id)
        ).scalar_one()
        return int(total)

    def drift(self, user_id: uuid.UUID) -> int:
        """Return cached minus logged points; zero when the aggregate is consistent."""
        aggregate = self.get_aggregate(user_id)
        cached = aggregate.total_points if aggregate else 0
        return cached - self.logged_points(user_id)

    def reconcile(self, user_id: uuid.UUID) -> UserScoreAggregate:
        """Rebuild a user's aggregate from the score event log.

        Streaks are replayed from the dates of the user's clear events.
        """
        events = self.session.execute(
            select(ScoreEvent).where(ScoreEvent.user_id == user_id)
        ).scalars().all()

        counts = {kind: 0 for kind in ScoreEventKind}
        for event in events:
            counts[event.kind] += 1
        current, longest, last = streaks_from_dates(
            event.created_at.date() for event in events if event.kind is ScoreEventKind.CLEARED
        )

        now = self.clock()
        aggregate = self._lock_aggregate(user_id, now)
        aggregate.total_points = sum(event.points for event in events)
        aggregate.total_reports = counts[ScoreEventKind.REPORT_CREATED]
        aggregate.total_clears = counts[ScoreEventKind.CLEARED]
        aggregate.total_verifications = counts[ScoreEventKind.VERIFICATION_CAST]
        aggregate.current_streak = current
        aggregate.longest_streak = longest
        aggregate.last_cleared_date = last
        aggregate.updated_at = now
        try:
            self.session.flush()
        except StaleDataError as exc:
            raise ConflictError() from exc
        return aggregate

    def _already_applied(
        self,
        kind: ScoreEventKind,
        user_id: uuid.UUID,
        report_id: uuid.UUID,
    ) -> bool:
        existing = self.session.execute(
            select(ScoreEvent.id).where(
                ScoreEvent.user_id == user_id,
                ScoreEvent.kind == kind,
                ScoreEvent.report_id == report_id,
            )
        ).first()
        return existing is not None

    def _lock_aggregate(self, user_id: uuid.UUID, now: datetime) -> UserScoreAggregate:
        """Load the aggregate row for update, creating it on first use."""
        aggregate = self.session.execute(
            select(UserScoreAggregate)
            .where(UserScoreAggregate.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars().first()
        if aggregate is None:
            aggregate = UserScoreAggregate(
                user_id=user_id,
                total_points=0,
                total_reports=0,
                total_clears=0,
                total_verifications=0,
                current_streak=0,
                longest_streak=0,
                updated_at=now,
            )
            self.session.add(aggregate)
        return aggregate

    def _clear_award(
        self,
        aggregate: UserScoreAggregate,
        report_id: uuid.UUID | None,
        now: datetime,
    ) -> ClearAward:
        streak = next_streak(aggregate.last_cleared_date, aggregate.current_streak, now.date())
        first_bonus = 0
        if report_id is not None and self._is_first_in_area(report_id, now):
            first_bonus = self.config.first_in_area_bonus
        return ClearAward(
            base=self.config.base_points_per_clear,
            streak_bonus=streak * self.config.streak_bonus_points,
            first_in_area_bonus=first_bonus,
            streak=streak,
        )

    def _is_first_in_area(self, report_id: uuid.UUID, now: datetime) -> bool:
        report = self.session.get(LitterReport, report_id)
        if report is None:
            raise ReportNotFound()
        since = now - timedelta(hours=self.config.first_in_area_window_hours)
        nearby = self.spatial_index.nearby_cleared_within(
            GeoPoint(report.latitude, report.longitude),
            self.config.first_in_area_radius_km,
            since,
        )
        # Any other nearby clear counts, including the same user's earlier ones.
        nearby.discard(report_id)
        return not nearby
