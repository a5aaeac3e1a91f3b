from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from .config import settings
from .errors import ConflictError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_session_factory(database_url: str, **engine_kwargs) -> sessionmaker[Session]:
    engine = create_engine(database_url, pool_pre_ping=True, **engine_kwargs)
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


SessionLocal = create_session_factory(settings.database_url)


def get_session_factory() -> sessionmaker[Session]:
    """
    FastAPI dependency, overridden in tests.
    """
    return SessionLocal


def get_db(factory: sessionmaker[Session] = Depends(get_session_factory)):
    """
    FastAPI dependency for read-only endpoints.
    """
    db = factory()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker[Session] = SessionLocal) -> Iterator[Session]:
    """
    Context manager for scripts, CLI, background tasks.
    Ensures commit / rollback semantics.
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def run_in_transaction(
    factory: sessionmaker[Session],
    fn: Callable[[Session], T],
    *,
    retries: int | None = None,
) -> T:
    """
    Run fn(db) in one transaction, committed on success.

    Concurrent modifications (ConflictError, or a stale version on flush)
    are retried with a fresh session. Other SQLAlchemy failures become
    StorageError; domain errors propagate untouched. In every failure case
    the transaction is rolled back as a whole.
    """
    attempts = max(1, retries if retries is not None else settings.transaction_retries)
    for attempt in range(1, attempts + 1):
        try:
            with session_scope(factory) as db:
                return fn(db)
        except (ConflictError, StaleDataError) as exc:
            logger.warning(
                "Concurrent balance update (attempt %d/%d): %s", attempt, attempts, exc
            )
            if attempt == attempts:
                raise ConflictError(
                    f"Balance was modified concurrently, gave up after {attempts} attempts"
                ) from exc
        except SQLAlchemyError as exc:
            logger.exception("Storage failure, transaction rolled back")
            raise StorageError() from exc
    raise AssertionError("unreachable")
