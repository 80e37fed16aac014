from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Chatty loggers of the Firebase Admin SDK's HTTP stack.
NOISY_LOGGERS = ("urllib3", "google.auth", "cachecontrol")


def _service_fields(service: str, environment: str, store_backend: str):
    def add_service_fields(_: logging.Logger, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        event_dict.setdefault("store_backend", store_backend)
        event_dict["request_id"] = request_id_ctx.get()
        return event_dict

    return add_service_fields


def _event_as_message(_: logging.Logger, __: str, event_dict: dict[str, Any]) -> str:
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return json.dumps(event_dict, ensure_ascii=False, default=str)


def configure_logging(
    level: str = "INFO",
    *,
    service: str = "MenuAdmin",
    environment: str = "local",
    store_backend: str = "memory",
) -> None:
    """Route structlog and stdlib logging to JSON lines on stdout."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.add_log_level,
            structlog.stdlib.add_logger_name,
            _service_fields(service, environment, store_backend),
            structlog.processors.format_exc_info,
            _event_as_message,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
