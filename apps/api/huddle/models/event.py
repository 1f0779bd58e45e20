from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from huddle.models.base import Base, IntPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from huddle.models.task import Task


class Event(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "events"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    # Set once at creation, never transferred
    organizer_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    tasks: Mapped[list[Task]] = relationship(
        back_populates="event",
        lazy="selectin",
        order_by="Task.id",
        passive_deletes=True,
    )
