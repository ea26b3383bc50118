"""Goal lifecycle: creation from a generated plan, activation and removal."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.errors import InvalidStateError, NotFoundError, ValidationError
from app.db.models.goal import GOAL_TYPES, Goal
from app.db.models.task import Task
from app.db.models.user import User
from app.db.unit_of_work import unit_of_work
from app.services.activity_service import ACTIVITY_STARTED, record_activity
from app.services.goal_tasks import create_tasks_from_specs, fetch_goal_tasks, fetch_history, plan_snapshot
from app.services.plan_generator import generate_task_specs
from app.services.plan_normalizer import PlanParams, TaskSpec
from app.services.user_service import get_or_create_user

logger = logging.getLogger(__name__)


@dataclass
class CreatedGoal:
    goal: Goal
    tasks: List[Task]
    plan_source: str


def validate_goal_params(params: PlanParams) -> None:
    if params.type not in GOAL_TYPES:
        raise ValidationError(f"Goal type must be one of: {', '.join(GOAL_TYPES)}")
    if not params.title or not params.title.strip():
        raise ValidationError("Goal title is required")
    if params.total_days < 1:
        raise ValidationError("total_days must be at least 1")
    if params.daily_minutes <= 0:
        raise ValidationError("daily_minutes must be positive")


def deactivate_other_goals(db: Session, user_id: UUID, keep_goal_id: Optional[UUID] = None) -> None:
    stmt = update(Goal).where(Goal.user_id == user_id, Goal.is_active.is_(True))
    if keep_goal_id is not None:
        stmt = stmt.where(Goal.id != keep_goal_id)
    db.execute(stmt.values(is_active=False).execution_options(synchronize_session="fetch"))


def build_goal(
    db: Session,
    owner_id: UUID,
    params: PlanParams,
    specs: List[TaskSpec],
    start_date: date,
    **shared_fields,
) -> Goal:
    """Stage an active goal with its task records inside the current transaction."""
    deactivate_other_goals(db, owner_id)
    goal = Goal(
        id=uuid4(),
        user_id=owner_id,
        type=params.type,
        title=params.title.strip(),
        description=params.description,
        total_days=params.total_days,
        daily_minutes=params.daily_minutes,
        start_date=start_date,
        current_day=1,
        completed_days=0,
        skipped_days=0,
        is_active=True,
        is_completed=False,
        plan_snapshot=plan_snapshot(specs),
        **shared_fields,
    )
    db.add(goal)
    db.add_all(create_tasks_from_specs(goal, specs, start_date))

    owner = db.get(User, owner_id)
    if owner is not None and not owner.onboarding_complete:
        owner.onboarding_complete = True
    return goal


def create_goal(
    db: Session,
    user_id: UUID,
    params: PlanParams,
    start_date: Optional[date] = None,
    request_id: Optional[str] = None,
) -> CreatedGoal:
    validate_goal_params(params)
    get_or_create_user(db, user_id)
    plan = generate_task_specs(params, request_id=request_id)
    start_date = start_date or date.today()

    with unit_of_work(db, "goal creation"):
        goal = build_goal(db, user_id, params, plan.specs, start_date)
        db.flush()
        record_activity(db, user_id, goal.id, ACTIVITY_STARTED, f'Started "{goal.title}"')

    tasks = fetch_goal_tasks(db, goal.id)
    logger.info("Created goal %s with %s tasks (%s plan)", goal.id, len(tasks), plan.source)
    return CreatedGoal(goal=goal, tasks=tasks, plan_source=plan.source)


def list_goals(db: Session, user_id: UUID) -> List[Goal]:
    return db.query(Goal).filter(Goal.user_id == user_id).order_by(Goal.created_at.desc()).all()


def get_goal(db: Session, user_id: UUID, goal_id: UUID) -> Goal:
    goal = db.query(Goal).filter(Goal.id == goal_id, Goal.user_id == user_id).first()
    if not goal:
        raise NotFoundError("Goal not found")
    return goal


def get_active_goal(db: Session, user_id: UUID) -> Goal:
    goal = (
        db.query(Goal)
        .filter(Goal.user_id == user_id, Goal.is_active.is_(True), Goal.is_completed.is_(False))
        .order_by(Goal.updated_at.desc())
        .first()
    )
    if not goal:
        raise NotFoundError("No active goal found")
    return goal


def _activate(db: Session, goal: Goal) -> None:
    if goal.is_completed:
        raise InvalidStateError("Goal is already completed")
    deactivate_other_goals(db, goal.user_id, keep_goal_id=goal.id)
    goal.is_active = True


def set_active_goal(db: Session, user_id: UUID, goal_id: UUID) -> Goal:
    with unit_of_work(db, "goal activation"):
        goal = get_goal(db, user_id, goal_id)
        _activate(db, goal)
    return goal


def toggle_active_goal(db: Session, user_id: UUID, goal_id: UUID) -> Goal:
    """Pause an active goal or resume a paused one."""
    with unit_of_work(db, "goal pause/resume"):
        goal = get_goal(db, user_id, goal_id)
        if goal.is_active:
            goal.is_active = False
        else:
            _activate(db, goal)
    return goal


def delete_goal(db: Session, user_id: UUID, goal_id: UUID) -> None:
    with unit_of_work(db, "goal deletion"):
        goal = get_goal(db, user_id, goal_id)
        db.delete(goal)
    logger.info("Deleted goal %s", goal_id)


def list_goal_tasks(db: Session, user_id: UUID, goal_id: UUID) -> List[Task]:
    goal = get_goal(db, user_id, goal_id)
    return fetch_goal_tasks(db, goal.id)


def list_goal_history(db: Session, user_id: UUID, goal_id: UUID) -> List[Task]:
    goal = get_goal(db, user_id, goal_id)
    return fetch_history(db, goal.id)
