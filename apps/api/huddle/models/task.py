from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from huddle.models.base import Base, IntPrimaryKeyMixin, TimestampMixin

if TYPE_CHECKING:
    from huddle.models.event import Event


class Task(Base, IntPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "tasks"

    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    event: Mapped[Event] = relationship(back_populates="tasks")
