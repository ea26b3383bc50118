"""Daily task API routes: today view, roadmap, history and transitions."""
from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.api.schemas.task import (
    ActionItemUpdateRequest,
    TaskListResponse,
    TaskTransitionResponse,
    TodayResponse,
)
from app.api.serializers import serialize_task, serialize_today
from app.db.deps import get_db
from app.observability.metrics import log_metric, timed
from app.observability.tracing import trace
from app.services import goal_service, task_state_machine
from app.services.daily_task_selector import get_today

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _transition_response(result: task_state_machine.TransitionResult, request_id: str | None) -> TaskTransitionResponse:
    return TaskTransitionResponse(
        task=serialize_task(result.task),
        today=serialize_today(result.today),
        requeued_task=serialize_task(result.requeued) if result.requeued is not None else None,
        request_id=request_id or "",
    )


@router.get("/today", response_model=TodayResponse)
def today(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TodayResponse:
    """The next pending task of the caller's active goal."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("task.today", metadata={"route": "/tasks/today"}, user_id=str(user_id), request_id=request_id):
        state = get_today(db, user_id)
    payload = serialize_today(state)
    return TodayResponse(**payload.model_dump(), request_id=request_id or "")


@router.get("/goal/{goal_id}", response_model=TaskListResponse)
def list_goal_tasks(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskListResponse:
    request_id = getattr(http_request.state, "request_id", None)
    tasks = goal_service.list_goal_tasks(db, user_id, goal_id)
    return TaskListResponse(goal_id=goal_id, tasks=[serialize_task(task) for task in tasks], request_id=request_id or "")


@router.get("/history/{goal_id}", response_model=TaskListResponse)
def goal_history(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskListResponse:
    request_id = getattr(http_request.state, "request_id", None)
    tasks = goal_service.list_goal_history(db, user_id, goal_id)
    return TaskListResponse(goal_id=goal_id, tasks=[serialize_task(task) for task in tasks], request_id=request_id or "")


@router.patch("/{task_id}/complete", response_model=TaskTransitionResponse)
def complete_task(
    task_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskTransitionResponse:
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {"route": f"/tasks/{task_id}/complete", "task_id": str(task_id), "request_id": request_id}
    with timed("task.complete") as extra:
        with trace("task.complete", metadata=metadata, user_id=str(user_id), request_id=request_id):
            result = task_state_machine.complete_task(db, user_id, task_id)
        extra["goal_completed"] = result.goal_completed
    return _transition_response(result, request_id)


@router.patch("/{task_id}/skip", response_model=TaskTransitionResponse)
def skip_task(
    task_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskTransitionResponse:
    """Skip the task; the day is re-queued at the end of the schedule."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {"route": f"/tasks/{task_id}/skip", "task_id": str(task_id), "request_id": request_id}
    with timed("task.skip"):
        with trace("task.skip", metadata=metadata, user_id=str(user_id), request_id=request_id):
            result = task_state_machine.skip_task(db, user_id, task_id)
    return _transition_response(result, request_id)


@router.patch("/{task_id}/action-items/{index}", response_model=TaskTransitionResponse)
def update_action_item(
    task_id: UUID,
    index: int,
    payload: ActionItemUpdateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> TaskTransitionResponse:
    request_id = getattr(http_request.state, "request_id", None)
    result = task_state_machine.set_action_item_completion(db, user_id, task_id, index, payload.completed)
    log_metric("task.action_item.updated", 1, metadata={"completed": payload.completed})
    return _transition_response(result, request_id)
