"""Data access for litter reports, built around a conditional status update."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from litterpick.core.errors import ConflictError, IllegalTransition, ReportNotFound
from litterpick.db.time import utcnow
from litterpick.models.report import (
    VOTABLE_STATUSES,
    LitterReport,
    ReportStatus,
    is_allowed_transition,
)

__all__ = ["ReportStore"]

logger = logging.getLogger(__name__)

# Columns a transition may never touch.
_IMMUTABLE_FIELDS = frozenset({"id", "reporter_id", "latitude", "longitude", "created_at", "version"})


class ReportStore:
    """Keyed report storage whose only write path is ``try_transition``."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def get(self, report_id: uuid.UUID) -> LitterReport:
        """Return a report by identifier or raise ``ReportNotFound``."""
        report = self.find(report_id)
        if report is None:
            raise ReportNotFound()
        return report

    def find(self, report_id: uuid.UUID) -> LitterReport | None:
        """Return a freshly loaded report, or None when it does not exist."""
        result = self.session.execute(
            select(LitterReport)
            .where(LitterReport.id == report_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    def add(
        self,
        *,
        reporter_id: uuid.UUID,
        latitude: float,
        longitude: float,
        description: str | None = None,
        photo_before: str | None = None,
        now: datetime | None = None,
    ) -> LitterReport:
        """Insert a new pending report and return the persisted ORM instance."""
        now = now or utcnow()
        report = LitterReport(
            reporter_id=reporter_id,
            latitude=latitude,
            longitude=longitude,
            description=description,
            photo_before=photo_before,
            status=ReportStatus.PENDING,
            version=1,
            created_at=now,
            updated_at=now,
        )
        self.session.add(report)
        self.session.flush()
        return report

    def try_transition(
        self,
        report_id: uuid.UUID,
        expected_status: ReportStatus,
        mutation: Mapping[str, Any],
        *,
        expected_version: int | None = None,
    ) -> LitterReport:
        """Apply ``mutation`` only if the report is still in ``expected_status``.

        The check and the write are a single ``UPDATE ... WHERE status = ?``
        statement, so of several racing callers exactly one sees a changed row.
        Passing ``expected_version`` narrows the guard to the exact snapshot the
        caller read.

        Args:
            report_id: Report to update.
            expected_status: Status the caller observed.
            mutation: Column values to write. A ``status`` entry must be an edge
                of the state machine leaving ``expected_status``.
            expected_version: Optional version token from the caller's read.

        Returns:
            The report as stored after the update.

        Raises:
            IllegalTransition: If the mutation asks for an edge that does not exist.
            ReportNotFound: If no report has this identifier.
            ConflictError: If the status (or version) no longer matches.
        """
        values = dict(mutation)
        forbidden = _IMMUTABLE_FIELDS.intersection(values)
        if forbidden:
            raise ValueError(f"Immutable report fields in mutation: {sorted(forbidden)}")

        target = values.get("status")
        if target is not None and not is_allowed_transition(expected_status, ReportStatus(target)):
            raise IllegalTransition(
                f"Reports cannot move from {expected_status.value} to {ReportStatus(target).value}"
            )

        values.setdefault("updated_at", utcnow())
        values["version"] = LitterReport.version + 1

        stmt = (
            update(LitterReport)
            .where(LitterReport.id == report_id, LitterReport.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if expected_version is not None:
            stmt = stmt.where(LitterReport.version == expected_version)

        result = self.session.execute(stmt)
        if result.rowcount != 1:
            current = self.find(report_id)
            if current is None:
                raise ReportNotFound()
            logger.warning(
                "Conditional update lost on report %s: expected %s, found %s",
                report_id,
                expected_status.value,
                current.status.value,
            )
            raise ConflictError()

        return self.get(report_id)

    def increment_votes(self, report_id: uuid.UUID, *, positive: bool) -> LitterReport:
        """Bump one verification counter on a cleared or just-verified report.

        Raises:
            ConflictError: If the report left the votable states meanwhile.
        """
        column = (
            LitterReport.verification_count_positive
            if positive
            else LitterReport.verification_count_negative
        )
        result = self.session.execute(
            update(LitterReport)
            .where(
                LitterReport.id == report_id,
                LitterReport.status.in_(VOTABLE_STATUSES),
            )
            .values({column.key: column + 1, "version": LitterReport.version + 1})
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError()
        return self.get(report_id)

    def list_by_reporter(self, reporter_id: uuid.UUID) -> list[LitterReport]:
        """Return reports created by a user, newest first."""
        result = self.session.execute(
            select(LitterReport)
            .where(LitterReport.reporter_id == reporter_id)
            .order_by(LitterReport.created_at.desc())
        )
        return list(result.scalars())

    def list_cleared_by(self, user_id: uuid.UUID) -> list[LitterReport]:
        """Return reports cleared by a user, most recent clear first."""
        result = self.session.execute(
            select(LitterReport)
            .where(LitterReport.cleared_by == user_id)
            .order_by(LitterReport.cleared_at.desc())
        )
        return list(result.scalars())

    def list_claimed_before(self, cutoff: datetime) -> list[LitterReport]:
        """Return reports still claimed whose claim started before ``cutoff``."""
        result = self.session.execute(
            select(LitterReport)
            .where(
                LitterReport.status == ReportStatus.CLAIMED,
                LitterReport.claimed_at < cutoff,
            )
            .order_by(LitterReport.claimed_at)
        )
        return list(result.scalars())
