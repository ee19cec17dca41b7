"""Report lifecycle: create, claim, clear and release."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from litterpick.core.errors import (
    AlreadyClaimed,
    ConflictError,
    EmailNotVerified,
    InvalidState,
    NotOwner,
    UserNotFound,
)
from litterpick.core.settings import Settings, settings
from litterpick.db.session import atomic
from litterpick.db.time import utcnow
from litterpick.models import LitterReport, ReportStatus, ScoreEventKind, User
from litterpick.repositories.report_repo import ReportStore
from litterpick.services.scoring import ScoringEngine

logger = logging.getLogger(__name__)

_CLAIM_CLEARED = {"claimed_by": None, "claimed_at": None}


@dataclass(frozen=True)
class ClearResult:
    """Outcome of a successful clear."""

    report: LitterReport
    points_awarded: int


class ReportLifecycle:
    """State machine over reports: Pending -> Claimed -> Cleared (-> Verified).

    Every transition is one conditional update through :class:`ReportStore`
    plus, where the transition earns points, one scoring event, committed as a
    single unit of work. The loser of a race gets a typed conflict and nothing
    is written on its behalf.
    """

    def __init__(
        self,
        session: Session,
        *,
        store: ReportStore | None = None,
        scoring: ScoringEngine | None = None,
        clock: Callable[[], datetime] = utcnow,
        config: Settings = settings,
    ) -> None:
        self.session = session
        self.store = store or ReportStore(session)
        self.scoring = scoring or ScoringEngine(session, clock=clock, config=config)
        self.clock = clock
        self.config = config

    def create_report(
        self,
        reporter_id: uuid.UUID,
        latitude: float,
        longitude: float,
        *,
        description: str | None = None,
        photo_before: str | None = None,
        email_verified: bool = False,
    ) -> LitterReport:
        """Create a pending report and count it towards the reporter's totals.

        Raises:
            ValueError: If the coordinates are out of range.
            UserNotFound: If the reporter is unknown.
            EmailNotVerified: If the identity provider has not verified the email.
        """
        if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
            raise ValueError("Coordinates out of range")

        with atomic(self.session):
            if self.session.get(User, reporter_id) is None:
                raise UserNotFound()
            if not email_verified:
                raise EmailNotVerified()

            report = self.store.add(
                reporter_id=reporter_id,
                latitude=latitude,
                longitude=longitude,
                description=description,
                photo_before=photo_before,
                now=self.clock(),
            )
            self.scoring.apply_event(ScoreEventKind.REPORT_CREATED, reporter_id, report.id)

        logger.info("Report %s created by %s", report.id, reporter_id)
        return report

    def claim(self, report_id: uuid.UUID, actor_id: uuid.UUID) -> LitterReport:
        """Claim a pending report for ``actor_id``.

        Raises:
            ReportNotFound: If the report does not exist.
            AlreadyClaimed: If the report is not pending, including when a
                concurrent claim won the race.
            NotOwner: If the actor is the reporter of a pending report.
        """
        with atomic(self.session):
            report = self.store.get(report_id)
            if report.status is not ReportStatus.PENDING:
                raise AlreadyClaimed()
            if report.reporter_id == actor_id:
                raise NotOwner("You cannot claim your own report")

            now = self.clock()
            try:
                report = self.store.try_transition(
                    report_id,
                    ReportStatus.PENDING,
                    {
                        "status": ReportStatus.CLAIMED,
                        "claimed_by": actor_id,
                        "claimed_at": now,
                        "updated_at": now,
                    },
                )
            except ConflictError as exc:
                raise AlreadyClaimed() from exc

        logger.info("Report %s claimed by %s", report_id, actor_id)
        return report

    def clear(
        self,
        report_id: uuid.UUID,
        actor_id: uuid.UUID,
        photo_after: str,
    ) -> ClearResult:
        """Mark a claimed report cleared by its claimant and award the clear.

        Raises:
            ReportNotFound: If the report does not exist.
            InvalidState: If the report is not claimed or changed underneath us.
            NotOwner: If someone other than the claimant tries to clear it.
        """
        if not photo_after:
            raise ValueError("An after photo is required to clear a report")

        with atomic(self.session):
            report = self.store.get(report_id)
            if report.status is not ReportStatus.CLAIMED:
                raise InvalidState(f"Report is {report.status.value}, not claimed")
            if report.claimed_by != actor_id:
                raise NotOwner()

            now = self.clock()
            try:
                report = self.store.try_transition(
                    report_id,
                    ReportStatus.CLAIMED,
                    {
                        "status": ReportStatus.CLEARED,
                        "cleared_by": actor_id,
                        "cleared_at": now,
                        "photo_after": photo_after,
                        "updated_at": now,
                    },
                    expected_version=report.version,
                )
            except ConflictError as exc:
                raise InvalidState() from exc

            points = self.scoring.apply_event(ScoreEventKind.CLEARED, actor_id, report_id)

        logger.info("Report %s cleared by %s (+%d)", report_id, actor_id, points)
        return ClearResult(report=report, points_awarded=points)

    def release_claim(
        self,
        report_id: uuid.UUID,
        actor_id: uuid.UUID | None = None,
    ) -> LitterReport:
        """Return a claimed report to the pending pool.

        ``actor_id=None`` means the system (claim expiry); otherwise only the
        claimant may abandon their claim.

        Raises:
            ReportNotFound: If the report does not exist.
            InvalidState: If the report is not claimed or changed underneath us.
            NotOwner: If a user other than the claimant asks to release it.
        """
        with atomic(self.session):
            report = self.store.get(report_id)
            if report.status is not ReportStatus.CLAIMED:
                raise InvalidState(f"Report is {report.status.value}, not claimed")
            if actor_id is not None and report.claimed_by != actor_id:
                raise NotOwner()

            try:
                report = self.store.try_transition(
                    report_id,
                    ReportStatus.CLAIMED,
                    {"status": ReportStatus.PENDING, **_CLAIM_CLEARED, "updated_at": self.clock()},
                    expected_version=report.version,
                )
            except ConflictError as exc:
                raise InvalidState() from exc

        logger.info("Claim on report %s released by %s", report_id, actor_id or "system")
        return report

    def release_expired_claims(self, older_than: datetime | None = None) -> list[uuid.UUID]:
        """Release every claim that started before ``older_than``.

        Defaults to ``now - CLAIM_TIMEOUT_MINUTES``. Reports that were cleared or
        released concurrently are skipped.

        Returns:
            Ids of the reports that were released.
        """
        cutoff = older_than or self.clock() - timedelta(minutes=self.config.claim_timeout_minutes)
        candidates = [report.id for report in self.store.list_claimed_before(cutoff)]

        released: list[uuid.UUID] = []
        for report_id in candidates:
            try:
                self.release_claim(report_id)
            except ConflictError:
                logger.info("Skipping report %s; it changed before release", report_id)
                continue
            released.append(report_id)

        logger.info("Released %d expired claims", len(released))
        return released
