"""Schemas for goal creation and lifecycle endpoints."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

GoalType = Literal["learning", "project", "health", "exam", "habit"]


class GoalCreateRequest(BaseModel):
    type: GoalType
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    total_days: int = Field(..., ge=1)
    daily_minutes: int = Field(default=60, gt=0)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class TimelineCheckRequest(BaseModel):
    type: str
    total_days: int = Field(..., ge=1)


class TimelineCheckResponse(BaseModel):
    is_rushed: bool
    suggested_days: int
    message: str


class GoalPayload(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    title: str
    description: Optional[str]
    total_days: int
    daily_minutes: int
    start_date: date
    current_day: int
    completed_days: int
    skipped_days: int
    is_active: bool
    is_completed: bool
    is_shared_goal: bool
    partner_id: Optional[UUID]
    partner_goal_id: Optional[UUID]
    shared_by_user_id: Optional[UUID]
    created_at: datetime


class GoalCreateResponse(BaseModel):
    goal: GoalPayload
    tasks_created: int
    plan_source: Literal["generator", "fallback"]
    request_id: str


class GoalResponse(BaseModel):
    goal: GoalPayload
    request_id: str


class GoalListResponse(BaseModel):
    goals: List[GoalPayload]
    request_id: str


class GoalDeleteResponse(BaseModel):
    id: UUID
    deleted: bool
    request_id: str
