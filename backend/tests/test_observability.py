"""Tests ensuring observability wiring is safe by default and tags traces."""
from __future__ import annotations

import importlib
from typing import Any, Dict, List

import pytest

from app.core.context import request_id_ctx_var, user_id_ctx_var
from app.observability import tracing


class _DummyTrace:
    def __init__(self, name: str, metadata: Dict[str, Any] | None):
        self.name = name
        self.metadata = metadata or {}
        self.error_info: Dict[str, Any] | None = None
        self.ended = False

    def update(self, error_info=None, **kwargs):
        self.error_info = error_info

    def end(self):
        self.ended = True


class _DummyOpik:
    def __init__(self):
        self.traces: List[_DummyTrace] = []

    def trace(self, name: str, metadata: Dict[str, Any] | None = None):
        trace = _DummyTrace(name, metadata)
        self.traces.append(trace)
        return trace


def test_app_import_succeeds_when_opik_is_disabled(monkeypatch) -> None:
    monkeypatch.setenv("OPIK_ENABLED", "false")
    monkeypatch.delenv("OPIK_API_KEY", raising=False)

    import app.core.config as core_config
    import app.observability.client as client_module
    import app.main as main_module

    importlib.reload(core_config)
    importlib.reload(client_module)
    reloaded_app = importlib.reload(main_module)

    assert hasattr(reloaded_app, "app")


def test_trace_is_noop_without_client(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "get_opik_client", lambda: None)

    with tracing.trace("noop") as span:
        assert span is None


def test_trace_picks_up_request_context(monkeypatch) -> None:
    dummy = _DummyOpik()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy)
    request_token = request_id_ctx_var.set("req-42")
    user_token = user_id_ctx_var.set("user-7")
    try:
        with tracing.trace("goal.create", metadata={"goal_type": "habit"}):
            pass
    finally:
        request_id_ctx_var.reset(request_token)
        user_id_ctx_var.reset(user_token)

    recorded = dummy.traces[0]
    assert recorded.metadata == {"goal_type": "habit", "user_id": "user-7", "request_id": "req-42"}
    assert recorded.ended is True


def test_trace_records_error_and_reraises(monkeypatch) -> None:
    dummy = _DummyOpik()
    monkeypatch.setattr(tracing, "get_opik_client", lambda: dummy)

    with pytest.raises(ValueError):
        with tracing.trace("task.skip"):
            raise ValueError("boom")

    recorded = dummy.traces[0]
    assert recorded.error_info == {"exception_type": "ValueError", "message": "boom"}
    assert recorded.ended is True


def test_client_stays_off_without_api_key(monkeypatch, caplog) -> None:
    from app.observability import client as client_module

    monkeypatch.setattr(client_module.settings, "opik_enabled", True)
    monkeypatch.setattr(client_module.settings, "opik_api_key", None)
    client_module.reset_opik()
    try:
        with caplog.at_level("WARNING", logger=client_module.__name__):
            assert client_module.init_opik() is None
            assert client_module.get_opik_client() is None
    finally:
        client_module.reset_opik()

    assert "OPIK_API_KEY is missing" in caplog.text
