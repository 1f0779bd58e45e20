from __future__ import annotations

from fastapi import APIRouter, Query, status

from huddle.api.errors import http_error_from_service
from huddle.api.v1.schemas import (
    AttendanceOut,
    DeleteOut,
    EventCreate,
    EventHit,
    EventOut,
    EventWithTasksOut,
    InviteIn,
    InviteOut,
    RSVPIn,
    SearchHit,
    SearchIn,
    TaskCreate,
    TaskHit,
    TaskOut,
)
from huddle.auth.deps import CurrentIdentity, DBSession
from huddle.auth.identity import Identity
from huddle.services import (
    attendance_service,
    events_service,
    invitation_service,
    search_service,
    tasks_service,
)
from huddle.services.exceptions import ServiceError
from huddle.services.search_service import EventResult

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, identity: CurrentIdentity, db: DBSession):
    try:
        event = events_service.create_event(
            db,
            identity,
            title=payload.title,
            date=payload.date,
            description=payload.description,
            location=payload.location,
        )
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return EventOut.model_validate(event)


@router.get("/organized", response_model=list[EventWithTasksOut])
def organized_events(identity: CurrentIdentity, db: DBSession):
    events = events_service.list_organized_events(db, identity)
    return [EventWithTasksOut.model_validate(e) for e in events]


@router.get("/invited", response_model=list[EventWithTasksOut])
def invited_events(identity: CurrentIdentity, db: DBSession):
    events = events_service.list_invited_events(db, identity)
    return [EventWithTasksOut.model_validate(e) for e in events]


def _run_search(db, identity: Identity, params: SearchIn) -> list[EventHit | TaskHit]:
    try:
        query = search_service.build_search_query(
            keyword=params.keyword,
            start_date=params.start_date,
            end_date=params.end_date,
            role=params.role,
            kind=params.kind,
        )
        results = search_service.search(db, identity, query)
    except ServiceError as err:
        raise http_error_from_service(err) from err

    hits: list[EventHit | TaskHit] = []
    for result in results:
        if isinstance(result, EventResult):
            hits.append(EventHit(event=EventWithTasksOut.model_validate(result.event)))
        else:
            hits.append(
                TaskHit(
                    task=TaskOut.model_validate(result.task),
                    event=EventOut.model_validate(result.event),
                )
            )
    return hits


@router.get("/search", response_model=list[SearchHit])
def search_events(
    identity: CurrentIdentity,
    db: DBSession,
    keyword: str | None = Query(default=None),
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    role: str | None = Query(default=None),
    kind: str | None = Query(default=None, alias="type"),
):
    params = SearchIn(
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        role=role,
        kind=kind,
    )
    return _run_search(db, identity, params)


@router.post("/search", response_model=list[SearchHit])
def search_events_body(payload: SearchIn, identity: CurrentIdentity, db: DBSession):
    return _run_search(db, identity, payload)


@router.delete("/{event_id}", response_model=DeleteOut)
def delete_event(event_id: int, identity: CurrentIdentity, db: DBSession):
    try:
        events_service.delete_event(db, identity, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return DeleteOut(event_id=event_id)


@router.post("/{event_id}/invite", response_model=InviteOut)
def invite_user(event_id: int, payload: InviteIn, identity: CurrentIdentity, db: DBSession):
    try:
        result = invitation_service.invite(db, identity, event_id, payload.user_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return InviteOut(status=result.status, event_id=result.event_id, user_id=result.user_id)


@router.post("/{event_id}/respond", response_model=AttendanceOut)
def respond(event_id: int, payload: RSVPIn, identity: CurrentIdentity, db: DBSession):
    try:
        row = attendance_service.rsvp(db, identity, event_id, payload.status)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return AttendanceOut.model_validate(row)


@router.get("/{event_id}/attendees", response_model=list[AttendanceOut])
def event_attendees(event_id: int, identity: CurrentIdentity, db: DBSession):
    try:
        rows = attendance_service.list_attendees(db, identity, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return [AttendanceOut.model_validate(r) for r in rows]


@router.post("/{event_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(event_id: int, payload: TaskCreate, identity: CurrentIdentity, db: DBSession):
    try:
        task = tasks_service.create_task(
            db,
            identity,
            event_id,
            title=payload.title,
            description=payload.description,
        )
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return TaskOut.model_validate(task)


@router.get("/{event_id}/tasks", response_model=list[TaskOut])
def event_tasks(event_id: int, identity: CurrentIdentity, db: DBSession):
    try:
        tasks = tasks_service.list_tasks(db, identity, event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return [TaskOut.model_validate(t) for t in tasks]
