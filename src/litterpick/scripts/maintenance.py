"""Maintenance jobs meant to be run by an external scheduler.

Examples:
    python -m litterpick.scripts.maintenance release-claims --older-than-minutes 720
    python -m litterpick.scripts.maintenance reconcile
"""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from litterpick.core.errors import ConflictError, StoreUnavailable
from litterpick.core.settings import settings
from litterpick.db.session import SessionLocal, atomic
from litterpick.db.time import utcnow
from litterpick.models import User
from litterpick.services.lifecycle import ReportLifecycle
from litterpick.services.scoring import ScoringEngine

logger = logging.getLogger("litterpick.maintenance")


def release_claims(db: Session, older_than_minutes: int) -> int:
    """Release claims older than the given age and return how many were released."""
    cutoff = utcnow() - timedelta(minutes=older_than_minutes)
    released = ReportLifecycle(db).release_expired_claims(cutoff)
    return len(released)


def reconcile_scores(db: Session) -> int:
    """Rebuild every aggregate whose points drifted from the event log.

    Returns:
        Number of aggregates that were rewritten.
    """
    engine = ScoringEngine(db)
    user_ids = db.execute(select(User.id)).scalars().all()
    fixed = 0
    for user_id in user_ids:
        if engine.drift(user_id) == 0:
            continue
        try:
            with atomic(db):
                engine.reconcile(user_id)
        except ConflictError:
            logger.warning("Aggregate for %s changed during reconcile; skipped", user_id)
            continue
        fixed += 1
    return fixed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="LitterPick maintenance jobs")
    sub = parser.add_subparsers(dest="command", required=True)

    release = sub.add_parser("release-claims", help="Return stale claims to the pending pool")
    release.add_argument(
        "--older-than-minutes",
        type=int,
        default=settings.claim_timeout_minutes,
        help="Claim age after which it is released (default: CLAIM_TIMEOUT_MINUTES)",
    )

    sub.add_parser("reconcile", help="Rebuild drifted score aggregates from the event log")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper())

    with SessionLocal() as db:
        try:
            if args.command == "release-claims":
                count = release_claims(db, args.older_than_minutes)
                print(f"Released {count} expired claims")
            else:
                count = reconcile_scores(db)
                print(f"Reconciled {count} score aggregates")
        except StoreUnavailable as exc:
            print(f"Store unavailable: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
