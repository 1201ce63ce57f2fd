"""Structured logging configuration helpers for cryptofiend."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

DEFAULT_ENV = os.getenv("CRYPTOFIEND_ENV", os.getenv("ENV", "local"))

_RESERVED_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter that emits a stable set of fields.

    Values passed through the logging ``extra`` dictionary are preserved, so
    call sites can attach identifiers such as ``event``, ``pair``, ``endpoint``
    or ``venue_code``. ``event`` is a short machine-readable label downstream
    systems can alert on.
    """

    def __init__(self, env: str | None = None) -> None:
        super().__init__()
        self.env = env or DEFAULT_ENV

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        log_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": log_time.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "event": getattr(record, "event", None),
            "env": getattr(record, "env", self.env),
            "venue": getattr(record, "venue", None),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_FIELDS:
                continue
            payload.setdefault(key, value)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(level: int = logging.INFO, env: str | None = None) -> None:
    """Configure root logging with a JSON formatter and stdout handler."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(env=env))
    root_logger.addHandler(handler)


def structured_log_extra(
    *,
    env: str | None = None,
    event: str | None = None,
    venue: str | None = None,
    pair: str | None = None,
    endpoint: str | None = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """Build a consistent set of logging extras with common fields.

    ``event`` should be a short, stable identifier for the log line. The
    optional identifiers (``venue``, ``pair``, ``endpoint``) are only added
    when provided; any other keyword is forwarded as-is.
    """

    extra: Dict[str, Any] = {
        "event": event,
        "env": env or DEFAULT_ENV,
    }

    identifier_fields = {"venue": venue, "pair": pair, "endpoint": endpoint}
    for key, value in identifier_fields.items():
        if value is not None:
            extra[key] = value

    extra.update(kwargs)
    return extra


__all__: list[str] = [
    "configure_logging",
    "structured_log_extra",
]
