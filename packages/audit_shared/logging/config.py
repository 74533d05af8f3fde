"""Stdout logging setup for hosts that attach audit hooks.

Records carry the bound log context (``context.py``) plus the structured
``extra`` fields the audit hooks attach to failure and progress lines.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from packages.audit_shared.config import LoggingSettings

from . import fields
from .context import bind_context, get_context

# ``extra`` keys promoted into structured output when present on a record.
_RECORD_FIELDS = (
    fields.STAGE,
    fields.ERROR_CODE,
    fields.ERROR_CATEGORY,
    fields.RETRYABLE,
    fields.AUDIT_ENTRY_ID,
)


class ContextFilter(logging.Filter):
    """Attach the current log context to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_context()
        record.context = context
        for key, value in context.items():
            setattr(record, key, value)
        return True


def _structured(record: logging.LogRecord) -> dict[str, Any]:
    """Collect bound context and promoted ``extra`` fields from a record."""
    data: dict[str, Any] = {}
    context = getattr(record, "context", None)
    if isinstance(context, dict):
        data.update(context)
    for key in _RECORD_FIELDS:
        if hasattr(record, key):
            data[key] = getattr(record, key)
    return data


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            fields.TIMESTAMP: datetime.fromtimestamp(record.created, UTC).isoformat(),
            fields.LEVEL: record.levelname,
            fields.LOGGER: record.name,
            fields.MESSAGE: record.getMessage(),
            **_structured(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


class PlainFormatter(logging.Formatter):
    """Human-readable lines with ``key=value`` context appended."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        data = _structured(record)
        if not data:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in sorted(data.items()))
        return f"{message} {suffix}"


def configure_logging(
    *,
    level: str = "INFO",
    json_output: bool = True,
    service: str | None = None,
    environment: str | None = None,
) -> None:
    """Replace root handlers with a single stdout handler.

    Safe to call repeatedly; ``service`` and ``environment`` are bound into the
    log context of the calling thread.
    """
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    bind_context(**{fields.SERVICE: service, fields.ENVIRONMENT: environment})


def configure_logging_from_settings(settings: LoggingSettings) -> None:
    """Configure logging from the ``logging`` settings subtree."""
    configure_logging(
        level=settings.level,
        json_output=settings.json_output,
        service=settings.service,
        environment=settings.environment,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
