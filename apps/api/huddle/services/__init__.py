from huddle.services.attendance_service import list_attendees, normalize_status, rsvp
from huddle.services.events_service import (
    create_event,
    delete_event,
    list_invited_events,
    list_organized_events,
)
from huddle.services.invitation_service import invite
from huddle.services.search_service import build_search_query, search
from huddle.services.tasks_service import create_task, list_tasks

__all__ = [
    "create_event",
    "list_organized_events",
    "list_invited_events",
    "delete_event",
    "invite",
    "rsvp",
    "normalize_status",
    "list_attendees",
    "create_task",
    "list_tasks",
    "build_search_query",
    "search",
]
