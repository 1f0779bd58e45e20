"""Access decisions for events and the records hanging off them.

Every function here is pure: the outcome depends only on the actor's user id
and the event's organizer id. Callers turn a DENY into an error with
:func:`enforce`.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from huddle.auth.identity import Identity
from huddle.models import Event
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import PermissionDeniedError, UnauthenticatedError


class DenyReason(str, Enum):
    NOT_ORGANIZER = "not organizer"
    NOT_AUTHENTICATED = "not authenticated"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None


ALLOW = Decision(allowed=True)


def _deny(reason: DenyReason) -> Decision:
    return Decision(allowed=False, reason=reason)


def _organizer_only(actor: Identity | None, event: Event) -> Decision:
    if actor is None:
        return _deny(DenyReason.NOT_AUTHENTICATED)
    if actor.user_id != event.organizer_id:
        return _deny(DenyReason.NOT_ORGANIZER)
    return ALLOW


def _any_authenticated(actor: Identity | None, event: Event) -> Decision:
    if actor is None:
        return _deny(DenyReason.NOT_AUTHENTICATED)
    return ALLOW


def can_delete_event(actor: Identity | None, event: Event) -> Decision:
    return _organizer_only(actor, event)


def can_invite(actor: Identity | None, event: Event) -> Decision:
    return _organizer_only(actor, event)


def can_create_task(actor: Identity | None, event: Event) -> Decision:
    return _organizer_only(actor, event)


def can_view_attendees(actor: Identity | None, event: Event) -> Decision:
    return _organizer_only(actor, event)


def can_rsvp(actor: Identity | None, event: Event) -> Decision:
    # Self-RSVP doubles as joining the event; no membership is required.
    return _any_authenticated(actor, event)


def can_view_tasks(actor: Identity | None, event: Event) -> Decision:
    return _any_authenticated(actor, event)


def enforce(decision: Decision, message: str) -> None:
    if decision.allowed:
        return
    if decision.reason == DenyReason.NOT_AUTHENTICATED:
        raise UnauthenticatedError(ErrorCode.UNAUTHENTICATED.value, DenyReason.NOT_AUTHENTICATED.value)
    raise PermissionDeniedError(ErrorCode.NOT_ORGANIZER.value, message)
