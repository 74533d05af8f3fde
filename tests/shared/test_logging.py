"""Tests for structured logging configuration and context propagation."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from packages.audit_shared.config import LoggingSettings
from packages.audit_shared.logging import (
    ContextFilter,
    JsonFormatter,
    PlainFormatter,
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    fields,
    get_context,
    log_context,
)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """Put back root handlers and level replaced by ``configure_logging``."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    clear_context()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()


def _record(message: str = "audit entry written") -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.state.audit_trail.hooks",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    ContextFilter().filter(record)
    return record


def test_log_context_is_scoped_to_block() -> None:
    bind_context(service="audit-trail")
    with log_context({fields.AUDIT_TABLE: "widgets", fields.AUDIT_OBJECT_ID: None}):
        assert get_context() == {"service": "audit-trail", "audit_table": "widgets"}
    assert get_context() == {"service": "audit-trail"}


def test_clear_context_removes_selected_keys() -> None:
    bind_context(audit_table="widgets", audit_operation="CREATE")
    clear_context("audit_table")
    assert get_context() == {"audit_operation": "CREATE"}


def test_json_formatter_includes_context_fields() -> None:
    with log_context({fields.AUDIT_TABLE: "widgets", fields.AUDIT_OPERATION: "CREATE"}):
        record = _record()

    payload = json.loads(JsonFormatter().format(record))

    assert payload[fields.MESSAGE] == "audit entry written"
    assert payload[fields.LEVEL] == "INFO"
    assert payload[fields.AUDIT_TABLE] == "widgets"
    assert payload[fields.AUDIT_OPERATION] == "CREATE"


def test_plain_formatter_appends_sorted_context() -> None:
    with log_context({fields.AUDIT_TABLE: "widgets", fields.AUDIT_OPERATION: "DELETE"}):
        record = _record()

    line = PlainFormatter().format(record)

    assert line.endswith("audit entry written audit_operation=DELETE audit_table=widgets")


def test_configure_logging_installs_single_stdout_handler() -> None:
    configure_logging(level="debug", json_output=False, service="audit-trail")
    configure_logging(level="warning", json_output=True, environment="test")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert handler.stream is sys.stdout
    assert isinstance(handler.formatter, JsonFormatter)
    assert root.level == logging.WARNING
    assert get_context()[fields.ENVIRONMENT] == "test"


def test_configure_logging_from_settings_seeds_service_context() -> None:
    configure_logging_from_settings(
        LoggingSettings(level="ERROR", json_output=False, service="audit", environment="ci")
    )

    root = logging.getLogger()
    assert root.level == logging.ERROR
    assert isinstance(root.handlers[0].formatter, PlainFormatter)
    assert get_context() == {fields.SERVICE: "audit", fields.ENVIRONMENT: "ci"}
