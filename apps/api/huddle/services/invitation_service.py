from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from huddle.auth.identity import Identity
from huddle.models import EventAttendee
from huddle.models.attendance import AttendanceStatus, AttendeeRole
from huddle.services import policy
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import ValidationError
from huddle.services.lookups import commit, find_attendance, get_event, get_user

logger = structlog.get_logger(__name__)


class InviteStatus(str, Enum):
    INVITED = "invited"
    ALREADY_PARTICIPANT = "already_participant"


@dataclass(frozen=True)
class InviteResult:
    status: InviteStatus
    event_id: int
    user_id: int


def invite(db: Session, actor: Identity, event_id: int, target_user_id: int) -> InviteResult:
    """Link ``target_user_id`` to the event as an attendee.

    Safe to retry: when the pair is already linked (by an earlier invitation,
    a self-RSVP or a concurrent call) the result is ``ALREADY_PARTICIPANT``
    and no row is written.
    """
    event = get_event(db, event_id)
    policy.enforce(policy.can_invite(actor, event), "only organizer can invite others")

    invitee = get_user(db, target_user_id)
    if invitee.id == event.organizer_id:
        raise ValidationError(ErrorCode.ALREADY_ORGANIZER.value, "user is already organizer")

    already = InviteResult(InviteStatus.ALREADY_PARTICIPANT, event.id, invitee.id)
    if find_attendance(db, event.id, invitee.id) is not None:
        return already

    db.add(
        EventAttendee(
            event_id=event.id,
            user_id=invitee.id,
            role=AttendeeRole.ATTENDEE.value,
            status=AttendanceStatus.NONE.value,
        )
    )
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        logger.info("invite_raced", event_id=already.event_id, user_id=already.user_id)
        return already
    commit(db, "create invitation")

    logger.info("user_invited", event_id=event.id, user_id=invitee.id, invited_by=actor.user_id)
    return InviteResult(InviteStatus.INVITED, event.id, invitee.id)
