"""Shared goals: invites, acceptance into linked goal pairs, partner progress."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.db.models.goal import Goal
from app.db.models.goal_invite import GoalInvite
from app.db.models.task import Task
from app.db.unit_of_work import unit_of_work
from app.services.activity_service import ACTIVITY_STARTED, record_activity
from app.services.daily_task_selector import GoalProgress, compute_progress
from app.services.goal_service import build_goal, get_goal
from app.services.goal_tasks import fetch_goal_tasks
from app.services.plan_normalizer import PlanParams, normalize_plan
from app.services.user_service import get_or_create_user

logger = logging.getLogger(__name__)


@dataclass
class SharedGoalPair:
    goal: Goal
    partner_goal: Goal


@dataclass
class PartnerProgress:
    goal: Goal
    partner_goal: Goal
    progress: GoalProgress
    tasks: List[Task]


def invite_payload(goal: Goal) -> Dict[str, Any]:
    return {
        "type": goal.type,
        "title": goal.title,
        "description": goal.description,
        "total_days": goal.total_days,
        "daily_minutes": goal.daily_minutes,
        "plan": list(goal.plan_snapshot or []),
    }


def _params_from_invite(goal_data: Dict[str, Any]) -> PlanParams:
    return PlanParams(
        type=goal_data.get("type") or "learning",
        title=goal_data.get("title") or "Shared goal",
        description=goal_data.get("description"),
        total_days=int(goal_data.get("total_days") or 1),
        daily_minutes=int(goal_data.get("daily_minutes") or settings.default_daily_minutes),
    )


def send_invite(db: Session, user_id: UUID, friend_id: UUID, goal_id: UUID) -> GoalInvite:
    if friend_id == user_id:
        raise ValidationError("You cannot invite yourself")
    goal = get_goal(db, user_id, goal_id)
    existing = (
        db.query(GoalInvite)
        .filter(GoalInvite.from_user_id == user_id, GoalInvite.to_user_id == friend_id)
        .first()
    )
    if existing:
        raise ValidationError("You already have a pending invite to this user")

    get_or_create_user(db, friend_id)
    with unit_of_work(db, "goal invite"):
        invite = GoalInvite(
            from_user_id=user_id,
            to_user_id=friend_id,
            source_goal_id=goal.id,
            goal_data=invite_payload(goal),
        )
        db.add(invite)
    logger.info("User %s invited %s to goal %s", user_id, friend_id, goal.id)
    return invite


def list_invites(db: Session, user_id: UUID) -> List[GoalInvite]:
    return (
        db.query(GoalInvite)
        .filter(GoalInvite.to_user_id == user_id)
        .order_by(GoalInvite.created_at.desc())
        .all()
    )


def _get_incoming_invite(db: Session, user_id: UUID, invite_id: UUID) -> GoalInvite:
    invite = (
        db.query(GoalInvite)
        .filter(GoalInvite.id == invite_id, GoalInvite.to_user_id == user_id)
        .first()
    )
    if not invite:
        raise NotFoundError("Invite not found")
    return invite


def accept_invite(db: Session, user_id: UUID, invite_id: UUID, start_date: Optional[date] = None) -> SharedGoalPair:
    """Create one goal per participant from the stored plan, linked to each other."""
    invite = _get_incoming_invite(db, user_id, invite_id)
    sender_id = invite.from_user_id
    params = _params_from_invite(invite.goal_data or {})
    plan = (invite.goal_data or {}).get("plan") or []
    start_date = start_date or date.today()

    with unit_of_work(db, "shared goal acceptance"):
        shared_fields = {"is_shared_goal": True, "shared_by_user_id": sender_id}
        # Each participant gets an independent replay of the same snapshot.
        sender_goal = build_goal(
            db, sender_id, params, normalize_plan(params, plan), start_date, partner_id=user_id, **shared_fields
        )
        accepter_goal = build_goal(
            db, user_id, params, normalize_plan(params, plan), start_date, partner_id=sender_id, **shared_fields
        )
        db.flush()
        sender_goal.partner_goal_id = accepter_goal.id
        accepter_goal.partner_goal_id = sender_goal.id
        db.delete(invite)
        record_activity(db, user_id, accepter_goal.id, ACTIVITY_STARTED, f'Started shared goal "{params.title}"')
        record_activity(db, sender_id, sender_goal.id, ACTIVITY_STARTED, f'Started shared goal "{params.title}"')

    logger.info("Invite %s accepted; goals %s and %s linked", invite_id, sender_goal.id, accepter_goal.id)
    return SharedGoalPair(goal=accepter_goal, partner_goal=sender_goal)


def decline_invite(db: Session, user_id: UUID, invite_id: UUID) -> None:
    with unit_of_work(db, "invite decline"):
        invite = _get_incoming_invite(db, user_id, invite_id)
        db.delete(invite)


def partner_progress(db: Session, user_id: UUID, goal_id: UUID) -> PartnerProgress:
    goal = get_goal(db, user_id, goal_id)
    if not goal.is_shared_goal or goal.partner_goal_id is None:
        raise NotFoundError("Goal has no partner")
    partner_goal = db.get(Goal, goal.partner_goal_id)
    if partner_goal is None:
        raise NotFoundError("Partner goal not found")
    return PartnerProgress(
        goal=goal,
        partner_goal=partner_goal,
        progress=compute_progress(db, partner_goal),
        tasks=fetch_goal_tasks(db, partner_goal.id),
    )
