from huddle.api.v1.schemas.events import (
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

__all__ = [
    "EventCreate",
    "EventOut",
    "EventWithTasksOut",
    "TaskCreate",
    "TaskOut",
    "AttendanceOut",
    "RSVPIn",
    "InviteIn",
    "InviteOut",
    "DeleteOut",
    "SearchIn",
    "EventHit",
    "TaskHit",
    "SearchHit",
]
