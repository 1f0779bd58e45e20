"""Keyword / date / membership search across events and their tasks.

Results come back as a flat list: every matching event first (ascending event
date), then every matching task (ascending date of its event). The two kinds are
never interleaved. Tasks are read through an inner join on their event, which
also supplies the event snapshot carried by each task result; a task whose event
is gone never matches.

Without a ``role`` the search is a directory search: it spans all events, not
only the ones the caller takes part in.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

import structlog
from sqlalchemy import Select, or_, select
from sqlalchemy.orm import Session, contains_eager

from huddle.auth.identity import Identity
from huddle.core.dates import parse_instant, parse_range_end
from huddle.models import Event, EventAttendee, Task
from huddle.models.attendance import AttendeeRole
from huddle.services.error_codes import ErrorCode
from huddle.services.exceptions import ValidationError

logger = structlog.get_logger(__name__)


class SearchRole(str, Enum):
    ORGANIZER = "organizer"
    ATTENDEE = "attendee"


class SearchKind(str, Enum):
    EVENT = "event"
    TASK = "task"
    BOTH = "both"


@dataclass(frozen=True)
class SearchQuery:
    keyword: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    role: SearchRole | None = None
    kind: SearchKind = SearchKind.BOTH

    @property
    def wants_events(self) -> bool:
        return self.kind in (SearchKind.EVENT, SearchKind.BOTH)

    @property
    def wants_tasks(self) -> bool:
        return self.kind in (SearchKind.TASK, SearchKind.BOTH)


@dataclass(frozen=True)
class EventResult:
    event: Event


@dataclass(frozen=True)
class TaskResult:
    task: Task
    event: Event


SearchResult = Union[EventResult, TaskResult]


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def build_search_query(
    keyword: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    role: str | None = None,
    kind: str | None = None,
) -> SearchQuery:
    start = end = None
    if not _blank(start_date):
        try:
            start, _ = parse_instant(start_date)
        except ValueError as exc:
            raise ValidationError(ErrorCode.INVALID_DATE.value, "invalid start_date format") from exc
    if not _blank(end_date):
        try:
            end = parse_range_end(end_date)
        except ValueError as exc:
            raise ValidationError(ErrorCode.INVALID_DATE.value, "invalid end_date format") from exc

    search_role = None
    if not _blank(role):
        try:
            search_role = SearchRole(role.strip().lower())
        except ValueError as exc:
            raise ValidationError(
                ErrorCode.INVALID_ROLE.value, "role must be 'organizer' or 'attendee'"
            ) from exc

    search_kind = SearchKind.BOTH
    if not _blank(kind):
        try:
            search_kind = SearchKind(kind.strip().lower())
        except ValueError as exc:
            raise ValidationError(
                ErrorCode.INVALID_TYPE.value, "type must be 'event', 'task' or 'both'"
            ) from exc

    return SearchQuery(
        keyword=None if _blank(keyword) else keyword.strip(),
        start=start,
        end=end,
        role=search_role,
        kind=search_kind,
    )


def _like_pattern(keyword: str) -> str:
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _text_match(pattern: str, *columns):
    return or_(*(column.ilike(pattern, escape="\\") for column in columns))


def _apply_event_filters(stmt: Select, actor: Identity, query: SearchQuery) -> Select:
    """Date range and membership filters on the joined/selected Event."""
    if query.start is not None:
        stmt = stmt.where(Event.date >= query.start)
    if query.end is not None:
        stmt = stmt.where(Event.date <= query.end)

    if query.role == SearchRole.ORGANIZER:
        stmt = stmt.where(Event.organizer_id == actor.user_id)
    elif query.role == SearchRole.ATTENDEE:
        # (event_id, user_id) is unique, so the join never duplicates rows.
        stmt = stmt.join(EventAttendee, EventAttendee.event_id == Event.id).where(
            EventAttendee.user_id == actor.user_id,
            EventAttendee.role == AttendeeRole.ATTENDEE.value,
        )
    return stmt


def _search_events(db: Session, actor: Identity, query: SearchQuery) -> list[EventResult]:
    stmt = select(Event)
    if query.keyword:
        stmt = stmt.where(_text_match(_like_pattern(query.keyword), Event.title, Event.description))
    stmt = _apply_event_filters(stmt, actor, query)

    events = db.scalars(stmt.order_by(Event.date.asc(), Event.id.asc())).all()
    return [EventResult(event=event) for event in events]


def _search_tasks(db: Session, actor: Identity, query: SearchQuery) -> list[TaskResult]:
    stmt = select(Task).join(Task.event)
    if query.keyword:
        stmt = stmt.where(
            _text_match(
                _like_pattern(query.keyword),
                Task.title,
                Task.description,
                Event.title,
                Event.description,
            )
        )
    stmt = _apply_event_filters(stmt, actor, query)

    stmt = stmt.options(contains_eager(Task.event)).order_by(Event.date.asc(), Task.id.asc())
    tasks = db.scalars(stmt).all()
    return [TaskResult(task=task, event=task.event) for task in tasks]


def search(db: Session, actor: Identity, query: SearchQuery) -> list[SearchResult]:
    results: list[SearchResult] = []
    if query.wants_events:
        results.extend(_search_events(db, actor, query))
    if query.wants_tasks:
        results.extend(_search_tasks(db, actor, query))

    logger.info(
        "search_executed",
        user_id=actor.user_id,
        kind=query.kind.value,
        role=query.role.value if query.role else None,
        has_keyword=bool(query.keyword),
        results=len(results),
    )
    return results
