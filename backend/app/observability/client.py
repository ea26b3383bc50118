"""Process-wide Opik client, created lazily from settings."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, Optional

from opik import Opik

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class _OpikState:
    client: Optional[Opik] = None
    attempted: bool = False


_state = _OpikState()
_lock = Lock()


def _client_kwargs() -> Optional[Dict[str, Any]]:
    if not settings.opik_enabled:
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is true but OPIK_API_KEY is missing; tracing stays off.")
        return None
    kwargs: Dict[str, Any] = {"project_name": settings.opik_project, "api_key": settings.opik_api_key}
    if settings.opik_workspace:
        kwargs["workspace"] = settings.opik_workspace
    return kwargs


def init_opik() -> Optional[Opik]:
    """Create the client on first call; later calls return the same result."""
    with _lock:
        if _state.attempted:
            return _state.client
        _state.attempted = True

        kwargs = _client_kwargs()
        if kwargs is None:
            return None
        try:
            _state.client = Opik(**kwargs)
        except Exception as exc:  # pragma: no cover - tracing must never break requests
            logger.warning("Failed to initialize Opik, tracing will be disabled: %s", exc)
            return None

    logger.info("Opik enabled (project=%s).", settings.opik_project)
    return _state.client


def get_opik_client() -> Optional[Opik]:
    if _state.attempted:
        return _state.client
    return init_opik()


def reset_opik() -> None:
    """Forget the cached client so the next call re-reads settings."""
    with _lock:
        _state.client = None
        _state.attempted = False


def flush_opik() -> None:
    """Flush buffered traces on shutdown."""
    client = _state.client
    if client is None:
        return
    try:
        client.flush()
    except Exception as exc:  # pragma: no cover
        logger.debug("Opik flush failed: %s", exc)
