"""Re-queue a skipped day at the back of its goal's schedule."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import List

from sqlalchemy.orm import Session

from app.db.models.task import TASK_PENDING, Task

logger = logging.getLogger(__name__)


def _remaining_pending(db: Session, skipped: Task) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.goal_id == skipped.goal_id, Task.status == TASK_PENDING, Task.id != skipped.id)
        .order_by(Task.day_number.asc(), Task.created_at.asc())
        .with_for_update()
        .all()
    )


def clone_for_requeue(skipped: Task, scheduled_date: date) -> Task:
    return Task(
        goal_id=skipped.goal_id,
        user_id=skipped.user_id,
        day_number=skipped.day_number,
        title=skipped.title,
        purpose=skipped.purpose,
        phase=skipped.phase,
        deliverables=list(skipped.deliverables or []),
        action_items=[{**item, "completed": False} for item in (skipped.action_items or [])],
        resources=[dict(resource) for resource in (skipped.resources or [])],
        skill_progression=skipped.skill_progression,
        estimated_minutes=skipped.estimated_minutes,
        status=TASK_PENDING,
        scheduled_date=scheduled_date,
        rescheduled_from_id=skipped.id,
    )


def requeue_skipped_task(db: Session, skipped: Task, today: date) -> Task:
    """Shift pending records one day and append a pending copy of ``skipped``.

    Runs inside the caller's transaction; nothing is committed here.
    """
    pending = _remaining_pending(db, skipped)
    latest: date | None = None
    for task in pending:
        if task.scheduled_date is None:
            continue
        task.scheduled_date = task.scheduled_date + timedelta(days=1)
        if latest is None or task.scheduled_date > latest:
            latest = task.scheduled_date

    trailing = (latest or today) + timedelta(days=1)
    clone = clone_for_requeue(skipped, trailing)
    db.add(clone)
    logger.info(
        "Re-queued day %s of goal %s for %s (%s pending shifted)",
        skipped.day_number,
        skipped.goal_id,
        trailing.isoformat(),
        len(pending),
    )
    return clone
