"""Lightweight metrics helpers."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from app.observability import tracing

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Log a metric to Opik if it is enabled."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    # A metric is a zero-length trace so it shows up next to the request spans.
    with tracing.trace(f"metric:{name}", metadata=payload):
        pass


@contextmanager
def timed(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
    """Emit ``<name>.success`` and ``<name>.latency_ms`` around a block.

    The yielded dict can be filled with extra metadata while the block runs.
    """
    extra: Dict[str, Any] = dict(metadata or {})
    start = perf_counter()
    success = False
    try:
        yield extra
        success = True
    finally:
        latency_ms = (perf_counter() - start) * 1000
        log_metric(f"{name}.success", 1 if success else 0, metadata=extra)
        log_metric(f"{name}.latency_ms", latency_ms, metadata=extra)
        if not success:
            logger.debug("%s failed after %.1fms", name, latency_ms)
