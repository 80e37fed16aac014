from __future__ import annotations

import json
import logging

import structlog

from menu_admin.core.logging import configure_logging, request_id_ctx


def test_log_lines_are_json_with_service_and_request_fields(caplog) -> None:
    configure_logging(
        "INFO", service="MenuAdmin", environment="test", store_backend="realtime_db"
    )
    caplog.set_level(logging.INFO)
    token = request_id_ctx.set("req-42")
    try:
        structlog.get_logger("menu_admin.tests").warning("menu_item_saved", item_id="a")
    finally:
        request_id_ctx.reset(token)

    line = json.loads(caplog.records[-1].getMessage())

    assert line["message"] == "menu_item_saved"
    assert line["item_id"] == "a"
    assert line["level"] == "warning"
    assert line["logger"] == "menu_admin.tests"
    assert line["request_id"] == "req-42"
    assert line["service"] == "MenuAdmin"
    assert line["environment"] == "test"
    assert line["store_backend"] == "realtime_db"
    assert "timestamp" in line


def test_sdk_http_loggers_are_quieted() -> None:
    configure_logging("DEBUG")

    assert logging.getLogger("urllib3").level == logging.WARNING
    assert logging.getLogger("google.auth").level == logging.WARNING
