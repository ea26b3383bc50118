"""Shared-goal API routes: invites and partner progress."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.api.schemas.shared_goal import (
    InviteAcceptResponse,
    InviteCreateRequest,
    InviteDeclineResponse,
    InviteListResponse,
    InviteResponse,
    PartnerProgressResponse,
)
from app.api.serializers import serialize_goal, serialize_invite, serialize_progress, serialize_task
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services import shared_goals

router = APIRouter(prefix="/goals", tags=["shared-goals"])


@router.get("/invites", response_model=InviteListResponse)
def list_invites(
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> InviteListResponse:
    request_id = getattr(http_request.state, "request_id", None)
    invites = shared_goals.list_invites(db, user_id)
    return InviteListResponse(invites=[serialize_invite(invite) for invite in invites], request_id=request_id or "")


@router.post("/invites", response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def send_invite(
    payload: InviteCreateRequest,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> InviteResponse:
    request_id = getattr(http_request.state, "request_id", None)
    metadata = {"goal_id": str(payload.goal_id), "friend_id": str(payload.friend_id)}
    with trace("shared_goal.invite", metadata=metadata, user_id=str(user_id), request_id=request_id):
        invite = shared_goals.send_invite(db, user_id, payload.friend_id, payload.goal_id)
    log_metric("shared_goal.invite.sent", 1)
    return InviteResponse(invite=serialize_invite(invite), request_id=request_id or "")


@router.post("/invites/{invite_id}/accept", response_model=InviteAcceptResponse)
def accept_invite(
    invite_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> InviteAcceptResponse:
    """Start the shared goal for both participants."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("shared_goal.accept", metadata={"invite_id": str(invite_id)}, user_id=str(user_id), request_id=request_id):
        pair = shared_goals.accept_invite(db, user_id, invite_id)
    log_metric("shared_goal.invite.accepted", 1)
    return InviteAcceptResponse(
        goal=serialize_goal(pair.goal),
        partner_goal=serialize_goal(pair.partner_goal),
        request_id=request_id or "",
    )


@router.delete("/invites/{invite_id}", response_model=InviteDeclineResponse)
def decline_invite(
    invite_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> InviteDeclineResponse:
    request_id = getattr(http_request.state, "request_id", None)
    shared_goals.decline_invite(db, user_id, invite_id)
    log_metric("shared_goal.invite.declined", 1)
    return InviteDeclineResponse(id=invite_id, declined=True, request_id=request_id or "")


@router.get("/{goal_id}/partner-progress", response_model=PartnerProgressResponse)
def partner_progress(
    goal_id: UUID,
    http_request: Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> PartnerProgressResponse:
    request_id = getattr(http_request.state, "request_id", None)
    summary = shared_goals.partner_progress(db, user_id, goal_id)
    return PartnerProgressResponse(
        goal_id=summary.goal.id,
        partner_id=summary.partner_goal.user_id,
        partner_goal=serialize_goal(summary.partner_goal),
        progress=serialize_progress(summary.progress),
        tasks=[serialize_task(task) for task in summary.tasks],
        request_id=request_id or "",
    )
