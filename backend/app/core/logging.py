"""Logging setup: one console handler, records tagged with request and caller ids."""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict

from app.core.context import get_request_id, get_user_id

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | user=%(user_id)s | %(message)s"

# Third-party loggers that are noisy at INFO.
QUIET_LOGGERS = ("httpx", "apscheduler.executors.default", "opik")

_configured = False


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and ``user_id`` on every record ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"
        record.user_id = get_user_id() or "-"
        return True


def build_logging_config(log_level: str) -> Dict[str, Any]:
    level = log_level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "filters": {"request_context": {"()": RequestContextFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
                "filters": ["request_context"],
            }
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def configure_logging(*, log_level: str = "INFO") -> None:
    """Apply the logging config once; repeated calls are ignored."""
    global _configured
    if _configured:
        return
    dictConfig(build_logging_config(log_level))
    _configured = True
    logging.getLogger(__name__).debug("Logging configured at %s", log_level)
