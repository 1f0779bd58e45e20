from __future__ import annotations

from collections.abc import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from huddle.auth.identity import Identity
from huddle.models import Task
from huddle.services import policy
from huddle.services.events_service import clean_title
from huddle.services.lookups import commit, get_event

logger = structlog.get_logger(__name__)


def create_task(
    db: Session,
    actor: Identity,
    event_id: int,
    *,
    title: str,
    description: str | None = None,
) -> Task:
    clean = clean_title(title)
    event = get_event(db, event_id)
    policy.enforce(policy.can_create_task(actor, event), "only organizer can create tasks")

    task = Task(event_id=event.id, title=clean, description=description or "")
    db.add(task)
    commit(db, "create task")

    logger.info("task_created", task_id=task.id, event_id=event.id)
    return task


def list_tasks(db: Session, actor: Identity, event_id: int) -> Sequence[Task]:
    event = get_event(db, event_id)
    policy.enforce(policy.can_view_tasks(actor, event), "cannot view tasks")

    return db.scalars(select(Task).where(Task.event_id == event.id).order_by(Task.id.asc())).all()
