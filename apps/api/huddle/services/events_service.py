from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from huddle.auth.identity import Identity
from huddle.core.dates import parse_instant
from huddle.models import Event, EventAttendee, Task
from huddle.models.attendance import AttendanceStatus, AttendeeRole
from huddle.services import policy
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import StorageError, ValidationError
from huddle.services.lookups import commit, get_event

logger = structlog.get_logger(__name__)


def parse_event_date(raw: str) -> datetime:
    try:
        instant, _ = parse_instant(raw)
    except ValueError as exc:
        raise ValidationError(
            ErrorCode.INVALID_DATE.value, "invalid date format (use RFC3339 or YYYY-MM-DD)"
        ) from exc
    return instant


def clean_title(raw: str | None) -> str:
    title = (raw or "").strip()
    if not title:
        raise ValidationError(ErrorCode.TITLE_REQUIRED.value, "title is required")
    return title


def create_event(
    db: Session,
    actor: Identity,
    *,
    title: str,
    date: str,
    description: str | None = None,
    location: str | None = None,
) -> Event:
    clean = clean_title(title)
    event_date = parse_event_date(date)

    event = Event(
        title=clean,
        description=description or "",
        location=location or "",
        date=event_date,
        organizer_id=actor.user_id,
    )
    db.add(event)

    try:
        db.flush()
        # The organizer row is written in the same transaction as the event.
        db.add(
            EventAttendee(
                event_id=event.id,
                user_id=actor.user_id,
                role=AttendeeRole.ORGANIZER.value,
                status=AttendanceStatus.NONE.value,
            )
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(ErrorCode.STORAGE_FAILURE.value, "could not create event") from exc
    commit(db, "create event")

    logger.info("event_created", event_id=event.id, organizer_id=actor.user_id)
    return event


def list_organized_events(db: Session, actor: Identity) -> Sequence[Event]:
    return db.scalars(
        select(Event)
        .where(Event.organizer_id == actor.user_id)
        .order_by(Event.date.asc(), Event.id.asc())
    ).all()


def list_invited_events(db: Session, actor: Identity) -> Sequence[Event]:
    return db.scalars(
        select(Event)
        .join(EventAttendee, EventAttendee.event_id == Event.id)
        .where(
            EventAttendee.user_id == actor.user_id,
            EventAttendee.role == AttendeeRole.ATTENDEE.value,
        )
        .order_by(Event.date.asc(), Event.id.asc())
    ).all()


def delete_event(db: Session, actor: Identity, event_id: int) -> None:
    event = get_event(db, event_id)
    policy.enforce(policy.can_delete_event(actor, event), "only organizer can delete the event")

    # Attendance rows, tasks and the event go together or not at all.
    try:
        db.execute(delete(EventAttendee).where(EventAttendee.event_id == event.id))
        db.execute(delete(Task).where(Task.event_id == event.id))
        db.execute(delete(Event).where(Event.id == event.id))
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(ErrorCode.STORAGE_FAILURE.value, "delete failed") from exc
    commit(db, "delete event")

    logger.info("event_deleted", event_id=event_id, organizer_id=actor.user_id)
