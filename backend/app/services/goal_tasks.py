"""Helpers for working with a goal's task records."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.models.goal import Goal
from app.db.models.task import TASK_COMPLETED, TASK_PENDING, TASK_SKIPPED, Task
from app.services.plan_normalizer import TaskSpec


def create_tasks_from_specs(goal: Goal, specs: List[TaskSpec], start_date: date) -> List[Task]:
    """Build one pending record per spec, scheduled on consecutive days."""
    tasks: List[Task] = []
    for spec in specs:
        task = Task(
            goal=goal,
            user_id=goal.user_id,
            day_number=spec.day_number,
            title=spec.title,
            purpose=spec.purpose,
            phase=spec.phase,
            deliverables=list(spec.deliverables),
            action_items=[item.model_dump() for item in spec.action_items],
            resources=[resource.model_dump() for resource in spec.resources],
            skill_progression=spec.skill_progression,
            estimated_minutes=spec.estimated_minutes,
            status=TASK_PENDING,
            scheduled_date=start_date + timedelta(days=spec.day_number - 1),
        )
        tasks.append(task)
    return tasks


def plan_snapshot(specs: List[TaskSpec]) -> List[dict]:
    return [spec.model_dump() for spec in specs]


def fetch_goal_tasks(db: Session, goal_id: UUID) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.goal_id == goal_id)
        .order_by(Task.day_number.asc(), Task.created_at.asc())
        .all()
    )


def fetch_history(db: Session, goal_id: UUID) -> List[Task]:
    """Completed and skipped records, most recent first."""
    finished_at = func.coalesce(Task.completed_at, Task.skipped_at)
    return (
        db.query(Task)
        .filter(Task.goal_id == goal_id, Task.status.in_((TASK_COMPLETED, TASK_SKIPPED)))
        .order_by(finished_at.desc(), Task.day_number.desc())
        .all()
    )


def count_pending(db: Session, goal_id: UUID) -> int:
    return (
        db.query(func.count(Task.id))
        .filter(Task.goal_id == goal_id, Task.status == TASK_PENDING)
        .scalar()
        or 0
    )
