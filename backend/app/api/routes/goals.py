"""Goal lifecycle API routes."""
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.api.schemas.goal import (
    GoalCreateRequest,
    GoalCreateResponse,
    GoalDeleteResponse,
    GoalListResponse,
    GoalResponse,
    TimelineCheckRequest,
    TimelineCheckResponse,
)
from app.api.serializers import serialize_goal
from app.db.deps import get_db
from app.observability.metrics import log_metric, timed
from app.observability.tracing import trace
from app.services import goal_service
from app.services.goal_timeline import check_timeline_and_suggest
from app.services.plan_normalizer import PlanParams

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=GoalCreateResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: GoalCreateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalCreateResponse:
    """Generate a plan and persist the goal with one task per day."""
    request_id = getattr(http_request.state, "request_id", None)
    params = PlanParams(
        type=payload.type,
        title=payload.title,
        description=payload.description,
        total_days=payload.total_days,
        daily_minutes=payload.daily_minutes,
    )
    metadata: Dict[str, Any] = {
        "route": "/goals",
        "goal_type": payload.type,
        "total_days": payload.total_days,
        "daily_minutes": payload.daily_minutes,
        "request_id": request_id,
    }

    with timed("goal.create", metadata={"goal_type": payload.type}) as extra:
        with trace("goal.create", metadata=metadata, user_id=str(user_id), request_id=request_id):
            created = goal_service.create_goal(db, user_id, params, request_id=request_id)
        extra["plan_source"] = created.plan_source

    log_metric("goal.create.tasks", len(created.tasks), metadata={"plan_source": created.plan_source})
    return GoalCreateResponse(
        goal=serialize_goal(created.goal),
        tasks_created=len(created.tasks),
        plan_source=created.plan_source,
        request_id=request_id or "",
    )


@router.post("/check-timeline", response_model=TimelineCheckResponse)
def check_timeline(
    payload: TimelineCheckRequest,
    user_id: UUID = Depends(get_current_user_id),
) -> TimelineCheckResponse:
    suggestion = check_timeline_and_suggest(payload.type, payload.total_days)
    return TimelineCheckResponse(
        is_rushed=suggestion.is_rushed,
        suggested_days=suggestion.suggested_days,
        message=suggestion.message,
    )


@router.get("", response_model=GoalListResponse)
def list_goals(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalListResponse:
    request_id = getattr(http_request.state, "request_id", None)
    goals = goal_service.list_goals(db, user_id)
    log_metric("goal.list.count", len(goals))
    return GoalListResponse(goals=[serialize_goal(goal) for goal in goals], request_id=request_id or "")


@router.get("/active", response_model=GoalResponse)
def get_active_goal(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    goal = goal_service.get_active_goal(db, user_id)
    return GoalResponse(goal=serialize_goal(goal), request_id=request_id or "")


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    goal = goal_service.get_goal(db, user_id, goal_id)
    return GoalResponse(goal=serialize_goal(goal), request_id=request_id or "")


@router.patch("/{goal_id}/set-active", response_model=GoalResponse)
def set_active_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Make this goal the caller's only active goal."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.set_active", metadata={"goal_id": str(goal_id)}, user_id=str(user_id), request_id=request_id):
        goal = goal_service.set_active_goal(db, user_id, goal_id)
    log_metric("goal.set_active.success", 1)
    return GoalResponse(goal=serialize_goal(goal), request_id=request_id or "")


@router.patch("/{goal_id}/toggle-active", response_model=GoalResponse)
def toggle_active_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalResponse:
    """Pause an active goal or resume a paused one."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.toggle_active", metadata={"goal_id": str(goal_id)}, user_id=str(user_id), request_id=request_id):
        goal = goal_service.toggle_active_goal(db, user_id, goal_id)
    log_metric("goal.toggle_active.success", 1, metadata={"is_active": goal.is_active})
    return GoalResponse(goal=serialize_goal(goal), request_id=request_id or "")


@router.delete("/{goal_id}", response_model=GoalDeleteResponse)
def delete_goal(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> GoalDeleteResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.delete", metadata={"goal_id": str(goal_id)}, user_id=str(user_id), request_id=request_id):
        goal_service.delete_goal(db, user_id, goal_id)
    log_metric("goal.delete.success", 1)
    return GoalDeleteResponse(id=goal_id, deleted=True, request_id=request_id or "")
