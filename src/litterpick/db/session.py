"""Database session configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from litterpick.core.errors import ConflictError, StoreUnavailable
from litterpick.core.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import litterpick.models  # noqa: E402,F401

engine = create_engine(
    settings.effective_database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """Run a block as one unit of work: commit on success, roll back otherwise.

    Driver-level failures are surfaced as ``StoreUnavailable`` and constraint
    violations that escaped a more specific handler as ``ConflictError``.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation rolled back: %s", exc.orig)
        raise ConflictError() from exc
    except OperationalError as exc:
        db.rollback()
        logger.error("Store unavailable", exc_info=True)
        raise StoreUnavailable() from exc
    except DBAPIError as exc:
        db.rollback()
        if exc.connection_invalidated:
            logger.error("Store connection lost", exc_info=True)
            raise StoreUnavailable() from exc
        raise
    except BaseException:
        db.rollback()
        raise


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
