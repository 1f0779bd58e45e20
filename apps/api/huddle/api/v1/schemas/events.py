from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from huddle.core.dates import to_utc
from huddle.services.invitation_service import InviteStatus


class SchemaBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


class UTCMixin(BaseModel):
    @field_validator("date", "created_at", "updated_at", mode="after", check_fields=False)
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # Some backends hand back naive values; everything is stored as UTC.
        if value is None:
            return value
        return to_utc(value)


class EventCreate(SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    location: str | None = Field(default=None, max_length=300)
    date: str = Field(description="RFC 3339 instant or YYYY-MM-DD")


class TaskCreate(SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None


class TaskOut(UTCMixin, SchemaBase):
    id: int
    event_id: int
    title: str
    description: str
    created_at: datetime
    updated_at: datetime


class EventOut(UTCMixin, SchemaBase):
    id: int
    title: str
    description: str
    location: str
    date: datetime
    organizer_id: int
    created_at: datetime
    updated_at: datetime


class EventWithTasksOut(EventOut):
    tasks: list[TaskOut] = Field(default_factory=list)


class AttendanceOut(UTCMixin, SchemaBase):
    id: int
    event_id: int
    user_id: int
    role: str
    status: str
    created_at: datetime
    updated_at: datetime


class RSVPIn(SchemaBase):
    status: str = Field(description="Going, Maybe or Not Going (case-insensitive)")


class InviteIn(SchemaBase):
    user_id: int = Field(gt=0)


class InviteOut(SchemaBase):
    status: InviteStatus
    event_id: int
    user_id: int


class DeleteOut(SchemaBase):
    status: Literal["deleted"] = "deleted"
    event_id: int


class SearchIn(SchemaBase):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keyword: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    role: str | None = None
    kind: str | None = Field(default=None, alias="type")


class EventHit(SchemaBase):
    type: Literal["event"] = "event"
    event: EventWithTasksOut


class TaskHit(SchemaBase):
    type: Literal["task"] = "task"
    task: TaskOut
    event: EventOut


SearchHit = Annotated[Union[EventHit, TaskHit], Field(discriminator="type")]
