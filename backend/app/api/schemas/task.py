"""Schemas for daily tasks and the today view."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class ActionItemPayload(BaseModel):
    text: str
    completed: bool = False


class ResourcePayload(BaseModel):
    type: str
    title: str = ""
    url: str
    creator: str = ""


class TaskPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    goal_id: UUID
    day_number: int
    title: str
    purpose: str
    phase: Optional[str]
    deliverables: List[str]
    action_items: List[ActionItemPayload]
    resources: List[ResourcePayload]
    skill_progression: Optional[str]
    estimated_minutes: int
    status: str
    scheduled_date: Optional[date]
    completed_at: Optional[datetime]
    skipped_at: Optional[datetime]
    rescheduled_from_id: Optional[UUID]


class GoalProgressPayload(BaseModel):
    id: UUID
    title: str
    type: str
    total_days: int
    current_day: int
    completed_days: int
    skipped_days: int
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    progress: int


class TodayPayload(BaseModel):
    completed: bool
    task: Optional[TaskPayload]
    goal: GoalProgressPayload
    message: Optional[str] = None


class TodayResponse(TodayPayload):
    request_id: str


class TaskListResponse(BaseModel):
    goal_id: UUID
    tasks: List[TaskPayload]
    request_id: str


class TaskTransitionResponse(BaseModel):
    task: TaskPayload
    today: TodayPayload
    requeued_task: Optional[TaskPayload] = None
    request_id: str


class ActionItemUpdateRequest(BaseModel):
    completed: bool
