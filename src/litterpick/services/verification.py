"""Verification ledger: one vote per voter per report and the consensus rule."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from litterpick.core.errors import (
    CommentRequired,
    ConflictError,
    DuplicateVote,
    InsufficientExperience,
    NotClearable,
    SelfVerification,
    VerificationRejected,
)
from litterpick.core.settings import Settings, settings
from litterpick.db.session import atomic
from litterpick.db.time import utcnow
from litterpick.models import LitterReport, ReportStatus, ScoreEventKind, VerificationVote
from litterpick.repositories.report_repo import ReportStore
from litterpick.services.scoring import ScoringEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a successful vote."""

    vote: VerificationVote
    report: LitterReport
    points_awarded: int
    # True only for the vote that moved the report to Verified.
    reached_consensus: bool


class VerificationLedger:
    """Append-only verification votes and the threshold consensus on top of them."""

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

    def cast_vote(
        self,
        report_id: uuid.UUID,
        voter_id: uuid.UUID,
        is_positive: bool,
        comment: str | None = None,
    ) -> VoteResult:
        """Record a vote, reward the voter and verify the report on consensus.

        Preconditions are checked in order and each has its own failure:
        the report must have been cleared, the voter must not be the clearer,
        the voter must have enough clears, must not have voted already, and a
        negative vote needs a comment.

        Raises:
            ReportNotFound: If the report does not exist.
            NotClearable: If the report is not cleared, including once it is verified.
            SelfVerification: If the voter cleared the report.
            InsufficientExperience: If the voter has fewer than the required clears.
            DuplicateVote: If the voter already voted on this report.
            CommentRequired: If a negative vote has no comment.
        """
        comment = comment.strip() if comment else None

        with atomic(self.session):
            report = self.store.get(report_id)
            try:
                self._check_preconditions(report, voter_id, is_positive, comment)
            except VerificationRejected as exc:
                logger.warning("Vote by %s on report %s rejected: %s", voter_id, report_id, exc.code)
                raise

            vote = VerificationVote(
                report_id=report_id,
                voter_id=voter_id,
                is_positive=is_positive,
                comment=comment,
                created_at=self.clock(),
            )
            self.session.add(vote)
            try:
                self.session.flush()
            except IntegrityError as exc:
                # A concurrent request from the same voter got there first.
                raise DuplicateVote() from exc

            try:
                report = self.store.increment_votes(report_id, positive=is_positive)
            except ConflictError as exc:
                raise NotClearable() from exc

            points = self.scoring.apply_event(
                ScoreEventKind.VERIFICATION_CAST, voter_id, report_id
            )
            reached = False
            if (
                is_positive
                and report.status is ReportStatus.CLEARED
                and report.verification_count_positive >= self.config.min_verifications_needed
            ):
                reached = self._promote(report)
                if reached:
                    report = self.store.get(report_id)

        logger.info(
            "Vote by %s on report %s (%s)%s",
            voter_id,
            report_id,
            "positive" if is_positive else "negative",
            ", consensus reached" if reached else "",
        )
        return VoteResult(vote=vote, report=report, points_awarded=points, reached_consensus=reached)

    def list_votes(self, report_id: uuid.UUID) -> list[VerificationVote]:
        """Return all votes on a report, newest first."""
        self.store.get(report_id)
        result = self.session.execute(
            select(VerificationVote)
            .where(VerificationVote.report_id == report_id)
            .order_by(VerificationVote.created_at.desc())
        )
        return list(result.scalars())

    def has_voted(self, report_id: uuid.UUID, voter_id: uuid.UUID) -> bool:
        """Return True when ``voter_id`` already has a vote on the report."""
        existing = self.session.execute(
            select(VerificationVote.voter_id).where(
                VerificationVote.report_id == report_id,
                VerificationVote.voter_id == voter_id,
            )
        ).first()
        return existing is not None

    def _check_preconditions(
        self,
        report: LitterReport,
        voter_id: uuid.UUID,
        is_positive: bool,
        comment: str | None,
    ) -> None:
        if report.status is not ReportStatus.CLEARED:
            raise NotClearable()
        if report.cleared_by == voter_id:
            raise SelfVerification()
        if not self.scoring.can_verify(voter_id):
            raise InsufficientExperience(
                f"You need to clear at least {self.config.min_clears_to_verify} reports "
                "before you can verify others"
            )
        if self.has_voted(report.id, voter_id):
            raise DuplicateVote()
        if not is_positive and not comment:
            raise CommentRequired()

    def _promote(self, report: LitterReport) -> bool:
        """Move a report to Verified once and credit the clearer.

        Returns False when another vote already promoted it.
        """
        try:
            self.store.try_transition(
                report.id,
                ReportStatus.CLEARED,
                {"status": ReportStatus.VERIFIED, "updated_at": self.clock()},
            )
        except ConflictError:
            return False

        if report.cleared_by is not None:
            self.scoring.apply_event(ScoreEventKind.VERIFIED, report.cleared_by, report.id)
        logger.info("Report %s verified", report.id)
        return True
