"""ORM models exposed for metadata discovery."""
from app.db.models.activity import Activity
from app.db.models.goal import Goal
from app.db.models.goal_invite import GoalInvite
from app.db.models.task import Task
from app.db.models.user import User

__all__ = [
    "Activity",
    "Goal",
    "GoalInvite",
    "Task",
    "User",
]
