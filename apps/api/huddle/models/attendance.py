from enum import Enum

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from huddle.models.base import Base, IntPrimaryKeyMixin, TimestampMixin


class AttendeeRole(str, Enum):
    ORGANIZER = "organizer"
    ATTENDEE = "attendee"


class AttendanceStatus(str, Enum):
    NONE = ""
    GOING = "Going"
    MAYBE = "Maybe"
    NOT_GOING = "Not Going"


class EventAttendee(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "event_attendees"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_attendee_event_user"),)

    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Stored as plain strings; values come from AttendeeRole / AttendanceStatus
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=AttendeeRole.ATTENDEE.value)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=AttendanceStatus.NONE.value)
