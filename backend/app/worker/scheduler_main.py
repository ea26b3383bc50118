"""Reminder worker: runs the daily sweep on an APScheduler cron trigger.

Start with ``python -m app.worker.scheduler_main``. The API process never
schedules jobs itself.
"""
from __future__ import annotations

import logging
import signal
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.reminder_service import run_daily_reminders

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "daily_reminder_job"


def register_jobs(scheduler: BackgroundScheduler) -> None:
    scheduler.add_job(
        run_reminder_job,
        trigger="cron",
        hour=settings.reminder_job_hour,
        minute=settings.reminder_job_minute,
        id=REMINDER_JOB_ID,
        replace_existing=True,
    )
    logger.info(
        "Registered reminder job (time=%02d:%02d %s)",
        settings.reminder_job_hour,
        settings.reminder_job_minute,
        settings.scheduler_timezone,
    )


def build_scheduler() -> BackgroundScheduler:
    """Scheduler in the configured timezone; jobs only when scheduling is enabled."""
    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
    if settings.scheduler_enabled:
        register_jobs(scheduler)
    else:
        logger.warning("Scheduler disabled via config; worker will idle")
    return scheduler


def run_reminder_job() -> None:
    with SessionLocal() as session:
        try:
            result = run_daily_reminders(session)
        except Exception:  # pragma: no cover - a failed sweep must not stop the scheduler
            logger.exception("Reminder job failed")
            return
    logger.info(
        "Reminder job complete: due=%s, sent=%s, skipped=%s",
        result.reminders_due,
        result.reminders_sent,
        result.reminders_skipped,
    )


def main() -> None:
    configure_logging(log_level=settings.log_level)
    logger.info("Reminder worker starting (enabled=%s)", settings.scheduler_enabled)

    scheduler = build_scheduler()
    if scheduler.get_jobs():
        scheduler.start()
        if settings.jobs_run_on_startup:
            logger.info("Running reminder job once on startup")
            run_reminder_job()

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Reminder worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        stop_event.wait()
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
