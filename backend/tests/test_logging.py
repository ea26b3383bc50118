import logging

from app.core.context import request_id_ctx_var, user_id_ctx_var
from app.core.logging import QUIET_LOGGERS, RequestContextFilter, build_logging_config


def _record() -> logging.LogRecord:
    return logging.LogRecord("app.test", logging.INFO, __file__, 1, "hello", None, None)


def test_filter_uses_placeholders_outside_a_request() -> None:
    record = _record()

    assert RequestContextFilter().filter(record) is True
    assert record.request_id == "-"
    assert record.user_id == "-"


def test_filter_stamps_request_and_caller_ids() -> None:
    request_token = request_id_ctx_var.set("req-1")
    user_token = user_id_ctx_var.set("3f0c")
    try:
        record = _record()
        RequestContextFilter().filter(record)
    finally:
        request_id_ctx_var.reset(request_token)
        user_id_ctx_var.reset(user_token)

    assert record.request_id == "req-1"
    assert record.user_id == "3f0c"


def test_config_normalizes_level_and_quiets_third_party_loggers() -> None:
    config = build_logging_config("debug")

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["console"]["filters"] == ["request_context"]
    assert set(config["loggers"]) == set(QUIET_LOGGERS)
