"""Task lifecycle: pending -> completed | skipped.

Transitions are conditional updates on ``status = 'pending'`` so two callers
racing on the same task cannot both succeed. Goal counters move with SQL
expressions in the same transaction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.errors import ActionItemIndexError, AlreadyProcessedError, InvalidStateError, NotFoundError
from app.db.models.goal import Goal
from app.db.models.task import TASK_COMPLETED, TASK_PENDING, TASK_SKIPPED, Task
from app.db.unit_of_work import unit_of_work
from app.services.activity_service import (
    ACTIVITY_COMPLETED,
    ACTIVITY_MILESTONE,
    ACTIVITY_SKIPPED,
    record_activity,
)
from app.services.daily_task_selector import TodayState, select_today_for_goal
from app.services.goal_tasks import count_pending
from app.services.reschedule_engine import requeue_skipped_task

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    task: Task
    today: TodayState
    requeued: Optional[Task] = None
    goal_completed: bool = False


def get_owned_task(db: Session, user_id: UUID, task_id: UUID) -> Task:
    task = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()
    if not task:
        raise NotFoundError("Task not found")
    return task


def _ensure_pending(task: Task) -> None:
    if task.status != TASK_PENDING:
        raise InvalidStateError(f"Task is already {task.status}")


def _transition(db: Session, task: Task, new_status: str, now: datetime) -> None:
    values = {"status": new_status}
    if new_status == TASK_COMPLETED:
        values["completed_at"] = now
    else:
        values["skipped_at"] = now

    result = db.execute(
        update(Task)
        .where(Task.id == task.id, Task.status == TASK_PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise AlreadyProcessedError("Task was already processed by another request")


def _today_after_commit(db: Session, task: Task) -> TodayState:
    db.refresh(task)
    goal = db.get(Goal, task.goal_id)
    return select_today_for_goal(db, goal)


def complete_task(db: Session, user_id: UUID, task_id: UUID, now: Optional[datetime] = None) -> TransitionResult:
    now = now or datetime.now(timezone.utc)
    with unit_of_work(db, "task completion"):
        task = get_owned_task(db, user_id, task_id)
        _ensure_pending(task)
        goal_id = task.goal_id
        _transition(db, task, TASK_COMPLETED, now)
        db.execute(
            update(Goal)
            .where(Goal.id == goal_id)
            .values(completed_days=Goal.completed_days + 1, current_day=Goal.current_day + 1)
            .execution_options(synchronize_session=False)
        )

        goal_completed = count_pending(db, goal_id) == 0
        if goal_completed:
            db.execute(
                update(Goal)
                .where(Goal.id == goal_id)
                .values(is_completed=True, is_active=False)
                .execution_options(synchronize_session=False)
            )

        goal_title = db.get(Goal, goal_id).title
        record_activity(db, user_id, goal_id, ACTIVITY_COMPLETED, f'Completed day {task.day_number} of "{goal_title}"')
        if goal_completed:
            record_activity(db, user_id, goal_id, ACTIVITY_MILESTONE, f'Finished every day of "{goal_title}"')

    if goal_completed:
        logger.info("Goal %s completed", goal_id)
    return TransitionResult(task=task, today=_today_after_commit(db, task), goal_completed=goal_completed)


def skip_task(
    db: Session,
    user_id: UUID,
    task_id: UUID,
    now: Optional[datetime] = None,
    today: Optional[date] = None,
) -> TransitionResult:
    """Skip without penalty: the day is re-queued behind the remaining schedule."""
    now = now or datetime.now(timezone.utc)
    today = today or date.today()
    with unit_of_work(db, "task skip"):
        task = get_owned_task(db, user_id, task_id)
        _ensure_pending(task)
        goal_id = task.goal_id
        _transition(db, task, TASK_SKIPPED, now)
        db.execute(
            update(Goal)
            .where(Goal.id == goal_id)
            .values(skipped_days=Goal.skipped_days + 1)
            .execution_options(synchronize_session=False)
        )
        clone = requeue_skipped_task(db, task, today=today)

        goal_title = db.get(Goal, goal_id).title
        record_activity(db, user_id, goal_id, ACTIVITY_SKIPPED, f'Skipped day {task.day_number} of "{goal_title}"')

    return TransitionResult(task=task, today=_today_after_commit(db, task), requeued=clone)


def set_action_item_completion(db: Session, user_id: UUID, task_id: UUID, index: int, completed: bool) -> TransitionResult:
    """Toggle one checklist entry; allowed in any status."""
    with unit_of_work(db, "action item update"):
        task = get_owned_task(db, user_id, task_id)
        items = list(task.action_items or [])
        if index < 0 or index >= len(items):
            raise ActionItemIndexError(f"Action item index {index} is out of range for {len(items)} items")
        items[index] = {**items[index], "completed": completed}
        task.action_items = items

    return TransitionResult(task=task, today=_today_after_commit(db, task))
