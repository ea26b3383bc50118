"""Pick the task a user should work on today and summarize goal progress."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.models.goal import Goal
from app.db.models.task import TASK_COMPLETED, TASK_PENDING, TASK_SKIPPED, Task


@dataclass
class GoalProgress:
    goal_id: UUID
    title: str
    type: str
    total_days: int
    current_day: int
    completed_days: int
    skipped_days: int
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    skipped_tasks: int
    progress: int


@dataclass
class TodayState:
    goal: Goal
    task: Optional[Task]
    progress: GoalProgress

    @property
    def completed(self) -> bool:
        return self.task is None


def progress_percent(completed: int, total: int) -> int:
    """Whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return int(100 * completed / total + 0.5)


def compute_progress(db: Session, goal: Goal) -> GoalProgress:
    rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(Task.goal_id == goal.id)
        .group_by(Task.status)
        .all()
    )
    counts: Dict[str, int] = {status: count for status, count in rows}
    total = sum(counts.values())
    completed = counts.get(TASK_COMPLETED, 0)
    return GoalProgress(
        goal_id=goal.id,
        title=goal.title,
        type=goal.type,
        total_days=goal.total_days,
        current_day=goal.current_day,
        completed_days=goal.completed_days,
        skipped_days=goal.skipped_days,
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=counts.get(TASK_PENDING, 0),
        skipped_tasks=counts.get(TASK_SKIPPED, 0),
        progress=progress_percent(completed, total),
    )


def select_today_for_goal(db: Session, goal: Goal) -> TodayState:
    """Lowest pending day number wins, so a re-queued day comes back before later days."""
    task = (
        db.query(Task)
        .filter(Task.goal_id == goal.id, Task.status == TASK_PENDING)
        .order_by(Task.day_number.asc(), Task.scheduled_date.asc(), Task.created_at.asc())
        .first()
    )
    return TodayState(goal=goal, task=task, progress=compute_progress(db, goal))


def find_active_goal(db: Session, user_id: UUID) -> Optional[Goal]:
    return (
        db.query(Goal)
        .filter(Goal.user_id == user_id, Goal.is_active.is_(True), Goal.is_completed.is_(False))
        .order_by(Goal.updated_at.desc())
        .first()
    )


def get_today(db: Session, user_id: UUID) -> TodayState:
    goal = find_active_goal(db, user_id)
    if goal is None:
        raise NotFoundError("No active goal found")
    return select_today_for_goal(db, goal)
