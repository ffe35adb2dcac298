"""Database configuration and session management."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from billtracker.core.config import settings
from billtracker.core.errors import PersistenceFailed

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def persistence_step(db: Session, operation: str) -> Iterator[None]:
    """Roll back and raise PersistenceFailed when a data store operation fails."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        reason = getattr(exc, "orig", None) or exc
        logger.warning("%s failed: %s", operation, reason)
        raise PersistenceFailed(f"{operation} failed: {reason}") from exc
