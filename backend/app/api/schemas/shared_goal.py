"""Schemas for shared-goal invites and partner progress."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.api.schemas.goal import GoalPayload
from app.api.schemas.task import GoalProgressPayload, TaskPayload


class InviteCreateRequest(BaseModel):
    friend_id: UUID
    goal_id: UUID


class InviteGoalSummary(BaseModel):
    type: str
    title: str
    description: Optional[str]
    total_days: int
    daily_minutes: int


class InvitePayload(BaseModel):
    id: UUID
    from_user_id: UUID
    to_user_id: UUID
    source_goal_id: Optional[UUID]
    goal: InviteGoalSummary
    created_at: datetime


class InviteResponse(BaseModel):
    invite: InvitePayload
    request_id: str


class InviteListResponse(BaseModel):
    invites: List[InvitePayload]
    request_id: str


class InviteAcceptResponse(BaseModel):
    goal: GoalPayload
    partner_goal: GoalPayload
    request_id: str


class InviteDeclineResponse(BaseModel):
    id: UUID
    declined: bool
    request_id: str


class PartnerProgressResponse(BaseModel):
    goal_id: UUID
    partner_id: UUID
    partner_goal: GoalPayload
    progress: GoalProgressPayload
    tasks: List[TaskPayload]
    request_id: str
