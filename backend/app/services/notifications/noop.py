"""No-op notification provider (logs only)."""
from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from app.services.notifications.base import NotificationResult, NotificationService


logger = logging.getLogger(__name__)


class NoopNotificationService(NotificationService):
    def notify_daily_task(
        self,
        *,
        user_id: UUID,
        goal_id: UUID,
        task_id: UUID,
        task_title: str,
        scheduled_date: date,
        request_id: str | None,
    ) -> NotificationResult:
        logger.info(
            "Notification queued (noop) daily_task user=%s goal=%s task=%s date=%s title=%r",
            user_id,
            goal_id,
            task_id,
            scheduled_date.isoformat(),
            task_title,
        )
        return NotificationResult(status="noop", reason="notification provider is noop")
