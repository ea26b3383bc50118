"""Opik trace context manager shared by routes and services."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from app.core.context import get_request_id, get_user_id
from app.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _trace_metadata(
    metadata: Optional[Dict[str, Any]],
    user_id: Optional[str],
    request_id: Optional[str],
) -> Optional[Dict[str, Any]]:
    merged = dict(metadata or {})
    caller = user_id or get_user_id()
    request = request_id or get_request_id()
    if caller:
        merged.setdefault("user_id", str(caller))
    if request:
        merged.setdefault("request_id", request)
    return merged or None


def _open(name: str, metadata: Optional[Dict[str, Any]]) -> Optional["Trace"]:
    client = get_opik_client()
    if client is None:
        return None
    try:
        return client.trace(name=name, metadata=metadata)
    except Exception as exc:  # pragma: no cover - tracing must never break requests
        logger.debug("Unable to start Opik trace %s: %s", name, exc)
        return None


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Wrap a block in an Opik trace named ``name``.

    ``user_id`` and ``request_id`` fall back to the values bound for the
    current request. Yields ``None`` when Opik is disabled. Exceptions are
    attached to the trace and re-raised unchanged.
    """
    opik_trace = _open(name, _trace_metadata(metadata, user_id, request_id))
    if opik_trace is None:
        yield None
        return

    try:
        yield opik_trace
    except Exception as exc:
        try:
            opik_trace.update(error_info={"exception_type": type(exc).__name__, "message": str(exc)})
        except Exception:  # pragma: no cover
            logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        try:
            opik_trace.end()
        except Exception:  # pragma: no cover
            logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)
