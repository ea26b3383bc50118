"""ORM -> response payload conversion shared by the routers."""
from __future__ import annotations

from app.api.schemas.goal import GoalPayload
from app.api.schemas.shared_goal import InviteGoalSummary, InvitePayload
from app.api.schemas.task import GoalProgressPayload, TaskPayload, TodayPayload
from app.db.models.goal import Goal
from app.db.models.goal_invite import GoalInvite
from app.db.models.task import Task
from app.services.daily_task_selector import GoalProgress, TodayState


def serialize_goal(goal: Goal) -> GoalPayload:
    return GoalPayload.model_validate(goal)


def serialize_task(task: Task) -> TaskPayload:
    return TaskPayload.model_validate(task)


def serialize_progress(progress: GoalProgress) -> GoalProgressPayload:
    return GoalProgressPayload(
        id=progress.goal_id,
        title=progress.title,
        type=progress.type,
        total_days=progress.total_days,
        current_day=progress.current_day,
        completed_days=progress.completed_days,
        skipped_days=progress.skipped_days,
        total_tasks=progress.total_tasks,
        completed_tasks=progress.completed_tasks,
        pending_tasks=progress.pending_tasks,
        progress=progress.progress,
    )


def serialize_today(state: TodayState) -> TodayPayload:
    if state.completed:
        return TodayPayload(
            completed=True,
            task=None,
            goal=serialize_progress(state.progress),
            message="All tasks for this goal are done.",
        )
    return TodayPayload(completed=False, task=serialize_task(state.task), goal=serialize_progress(state.progress))


def serialize_invite(invite: GoalInvite) -> InvitePayload:
    data = invite.goal_data or {}
    return InvitePayload(
        id=invite.id,
        from_user_id=invite.from_user_id,
        to_user_id=invite.to_user_id,
        source_goal_id=invite.source_goal_id,
        goal=InviteGoalSummary(
            type=data.get("type", ""),
            title=data.get("title", ""),
            description=data.get("description"),
            total_days=data.get("total_days", 0),
            daily_minutes=data.get("daily_minutes", 0),
        ),
        created_at=invite.created_at,
    )
