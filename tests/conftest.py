# tests/conftest.py
from __future__ import annotations

import uuid
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from litterpick.core.settings import Settings, settings
from litterpick.db.session import Base
from litterpick.db.session import get_db as app_get_session
from litterpick.main import app as fastapi_app
from litterpick.models import LitterReport, User
from litterpick.services.lifecycle import ReportLifecycle
from litterpick.services.scoring import ScoringEngine
from litterpick.services.verification import VerificationLedger

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
# Voter helper reports are spread along a meridian, roughly 11 km apart.
_SPREAD_COUNTER = count(1)


def enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FrozenClock:
    """Deterministic clock that only moves when a test advances it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit their own units of work, so each test gets a fresh database.
    SessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """The settings instance the services read at runtime."""
    return settings


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 2, 9, 0, tzinfo=UTC))


@pytest.fixture()
def scoring(db_session: Session, clock: FrozenClock) -> ScoringEngine:
    return ScoringEngine(db_session, clock=clock)


@pytest.fixture()
def lifecycle(db_session: Session, clock: FrozenClock, scoring: ScoringEngine) -> ReportLifecycle:
    return ReportLifecycle(db_session, scoring=scoring, clock=clock)


@pytest.fixture()
def ledger(db_session: Session, clock: FrozenClock, scoring: ScoringEngine) -> VerificationLedger:
    return VerificationLedger(db_session, scoring=scoring, clock=clock)


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Create and commit a user; ``created_at`` increases with each call."""

    def _make_user(
        display_name: str | None = None,
        *,
        city: str | None = None,
        country: str | None = None,
    ) -> User:
        n = next(_USER_COUNTER)
        user = User(
            id=uuid.uuid4(),
            display_name=display_name or f"user{n}",
            city=city,
            country=country,
            created_at=datetime(2025, 1, 1, tzinfo=UTC) + timedelta(minutes=n),
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_report(lifecycle: ReportLifecycle) -> Callable[..., LitterReport]:
    def _make_report(
        reporter: User,
        latitude: float = 51.50,
        longitude: float = -0.12,
        **kwargs: Any,
    ) -> LitterReport:
        return lifecycle.create_report(
            reporter.id,
            latitude,
            longitude,
            email_verified=True,
            **kwargs,
        )

    return _make_report


@pytest.fixture()
def cleared_report(
    lifecycle: ReportLifecycle,
    make_report: Callable[..., LitterReport],
) -> Callable[..., LitterReport]:
    """Walk a fresh report through Pending -> Claimed -> Cleared."""

    def _cleared_report(
        reporter: User,
        clearer: User,
        latitude: float = 51.50,
        longitude: float = -0.12,
        photo_after: str = "p1",
    ) -> LitterReport:
        report = make_report(reporter, latitude, longitude)
        lifecycle.claim(report.id, clearer.id)
        return lifecycle.clear(report.id, clearer.id, photo_after).report

    return _cleared_report


@pytest.fixture()
def experienced_user(
    make_user: Callable[..., User],
    cleared_report: Callable[..., LitterReport],
    test_settings: Settings,
) -> Callable[..., User]:
    """Create a user who has cleared exactly enough reports to verify."""

    def _experienced_user(clears: int | None = None, **user_kwargs: Any) -> User:
        user = make_user(**user_kwargs)
        reporter = make_user()
        for _ in range(test_settings.min_clears_to_verify if clears is None else clears):
            latitude = -60.0 + (next(_SPREAD_COUNTER) % 1000) * 0.1
            cleared_report(reporter, user, latitude, 10.0)
        return user

    return _experienced_user


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Headers the identity gateway would forward for a user."""

    def _auth_headers(user: User, *, email_verified: bool = True) -> dict[str, str]:
        return {
            "X-User-Id": str(user.id),
            "X-Email-Verified": "true" if email_verified else "false",
        }

    return _auth_headers
