"""Notification service interface."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from uuid import UUID


@dataclass
class NotificationResult:
    status: str
    reason: str


class NotificationService:
    """Base interface for notification providers."""

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
        raise NotImplementedError
