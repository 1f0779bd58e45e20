from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.auth.identity import Identity
from huddle.models import EventAttendee
from huddle.models.attendance import AttendanceStatus, AttendeeRole
from huddle.services import policy
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import ValidationError
from huddle.services.lookups import commit, find_attendance, get_event

logger = structlog.get_logger(__name__)

RSVP_STATUSES = (AttendanceStatus.GOING, AttendanceStatus.MAYBE, AttendanceStatus.NOT_GOING)


def normalize_status(raw: str | None) -> AttendanceStatus:
    """Map loose user input ("  not GOING ") onto one of the RSVP statuses."""
    normalized = (raw or "").strip().lower().title()
    for status in RSVP_STATUSES:
        if normalized == status.value:
            return status
    raise ValidationError(
        ErrorCode.INVALID_STATUS.value, "status must be one of: Going, Maybe, Not Going"
    )


def _apply_status(row: EventAttendee, status: AttendanceStatus) -> None:
    if row.role == AttendeeRole.ORGANIZER.value:
        raise ValidationError(
            ErrorCode.ALREADY_ORGANIZER.value, "organizer cannot rsvp to their own event"
        )
    row.status = status.value


def rsvp(db: Session, actor: Identity, event_id: int, raw_status: str | None) -> EventAttendee:
    status = normalize_status(raw_status)
    event = get_event(db, event_id)
    policy.enforce(policy.can_rsvp(actor, event), "cannot rsvp to this event")

    existing = find_attendance(db, event.id, actor.user_id)
    if existing is not None:
        _apply_status(existing, status)
        db.add(existing)
        commit(db, "update status")
        logger.info("rsvp_recorded", event_id=event.id, user_id=actor.user_id, status=status.value)
        return existing

    row = EventAttendee(
        event_id=event.id,
        user_id=actor.user_id,
        role=AttendeeRole.ATTENDEE.value,
        status=status.value,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError:
        # Lost a race with a concurrent insert for the same (event, user).
        db.rollback()
        row = find_attendance(db, event.id, actor.user_id)
        if row is None:
            raise
        _apply_status(row, status)
        db.add(row)
    commit(db, "set attendance")

    logger.info("rsvp_recorded", event_id=event.id, user_id=actor.user_id, status=status.value)
    return row


def list_attendees(db: Session, actor: Identity, event_id: int) -> Sequence[EventAttendee]:
    event = get_event(db, event_id)
    policy.enforce(policy.can_view_attendees(actor, event), "only organizer can view attendees")

    return db.scalars(
        select(EventAttendee)
        .where(EventAttendee.event_id == event.id)
        .order_by(EventAttendee.id.asc())
    ).all()
