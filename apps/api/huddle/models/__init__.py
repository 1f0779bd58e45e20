from huddle.models.attendance import EventAttendee
from huddle.models.base import Base
from huddle.models.event import Event
from huddle.models.task import Task
from huddle.models.user import User

__all__ = ["Base", "User", "Event", "Task", "EventAttendee"]
