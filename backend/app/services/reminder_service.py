"""Daily reminder sweep. Reads task state only; never writes."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.models.goal import Goal
from app.db.models.task import TASK_PENDING, Task
from app.db.models.user import User
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.notifications.base import NotificationResult
from app.services.notifications.factory import get_notification_service

logger = logging.getLogger(__name__)


@dataclass
class DueReminder:
    user_id: UUID
    goal_id: UUID
    task_id: UUID
    task_title: str
    scheduled_date: date


@dataclass
class ReminderSweepResult:
    reminders_due: int = 0
    reminders_sent: int = 0
    reminders_skipped: int = 0
    results: List[NotificationResult] = field(default_factory=list)


def find_due_reminders(db: Session, today: date) -> List[DueReminder]:
    """One reminder per active goal whose next pending task is scheduled for ``today``."""
    rows = (
        db.query(User.id, Goal.id, Task.id, Task.title, Task.scheduled_date)
        .join(Goal, Goal.user_id == User.id)
        .join(Task, Task.goal_id == Goal.id)
        .filter(
            User.reminder_enabled.is_(True),
            User.onboarding_complete.is_(True),
            Goal.is_active.is_(True),
            Goal.is_completed.is_(False),
            Task.status == TASK_PENDING,
            Task.scheduled_date == today,
        )
        .order_by(User.id, Goal.id, Task.day_number.asc())
        .all()
    )
    due: List[DueReminder] = []
    seen_goals = set()
    for user_id, goal_id, task_id, title, scheduled_date in rows:
        if goal_id in seen_goals:
            continue
        seen_goals.add(goal_id)
        due.append(DueReminder(user_id, goal_id, task_id, title, scheduled_date))
    return due


def run_daily_reminders(db: Session, today: Optional[date] = None, request_id: str | None = None) -> ReminderSweepResult:
    today = today or date.today()
    result = ReminderSweepResult()
    due = find_due_reminders(db, today)
    result.reminders_due = len(due)

    if not settings.notifications_enabled:
        result.reminders_skipped = len(due)
        logger.info("Notifications disabled; %s reminders not sent", len(due))
        log_metric("reminders.skipped", len(due), metadata={"reason": "notifications disabled"})
        return result

    service = get_notification_service()
    with trace("reminders.daily", metadata={"date": today.isoformat(), "due": len(due)}, request_id=request_id):
        for reminder in due:
            outcome = service.notify_daily_task(
                user_id=reminder.user_id,
                goal_id=reminder.goal_id,
                task_id=reminder.task_id,
                task_title=reminder.task_title,
                scheduled_date=reminder.scheduled_date,
                request_id=request_id,
            )
            result.results.append(outcome)
            result.reminders_sent += 1

    log_metric("reminders.sent", result.reminders_sent, metadata={"provider": settings.notifications_provider})
    return result
