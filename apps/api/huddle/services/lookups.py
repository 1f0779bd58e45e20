from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from huddle.models import Event, EventAttendee, User
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import NotFoundError, StorageError

logger = structlog.get_logger(__name__)


def get_event(db: Session, event_id: int) -> Event:
    try:
        event = db.get(Event, event_id)
    except SQLAlchemyError as exc:
        raise StorageError(ErrorCode.STORAGE_FAILURE.value, "could not load event") from exc
    if event is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
    return event


def get_user(db: Session, user_id: int) -> User:
    try:
        user = db.get(User, user_id)
    except SQLAlchemyError as exc:
        raise StorageError(ErrorCode.STORAGE_FAILURE.value, "could not load user") from exc
    if user is None:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "user not found")
    return user


def find_attendance(db: Session, event_id: int, user_id: int) -> EventAttendee | None:
    return db.scalar(
        select(EventAttendee).where(
            EventAttendee.event_id == event_id,
            EventAttendee.user_id == user_id,
        )
    )


def commit(db: Session, action: str) -> None:
    """Commit the unit of work, or roll it back and raise StorageError."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("commit_failed", action=action, error=str(exc))
        raise StorageError(ErrorCode.STORAGE_FAILURE.value, f"{action} failed") from exc
