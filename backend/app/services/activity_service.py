"""Activity rows for goal starts, task completions, skips and milestones."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models.activity import Activity
from app.db.models.user import User

ACTIVITY_STARTED = "started"
ACTIVITY_COMPLETED = "completed"
ACTIVITY_SKIPPED = "skipped"
ACTIVITY_MILESTONE = "milestone"


def record_activity(db: Session, user_id: UUID, goal_id: UUID, activity_type: str, message: str) -> Activity:
    """Stage an activity row in the caller's transaction.

    Visibility follows the owner's activity-feed preference.
    """
    user: Optional[User] = db.get(User, user_id)
    activity = Activity(
        user_id=user_id,
        goal_id=goal_id,
        type=activity_type,
        message=message,
        is_public=bool(user.show_in_activity_feed) if user else False,
    )
    db.add(activity)
    return activity
