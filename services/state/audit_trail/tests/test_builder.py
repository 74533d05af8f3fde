"""Unit tests for audit entry assembly."""

from __future__ import annotations

import json
from datetime import datetime

from services.state.audit_trail.builder import (
    build_entry,
    object_id_from,
    serialize_snapshot,
)
from services.state.audit_trail.domain import OperationType


def test_object_id_requires_string_value() -> None:
    assert object_id_from({"id": "42"}) == "42"
    assert object_id_from({"id": 42}) == ""
    assert object_id_from({}) == ""
    assert object_id_from({"code": "c-1"}, key="code") == "c-1"


def test_serialize_snapshot_falls_back_to_empty_object() -> None:
    """Unserializable values never escape the builder."""
    assert serialize_snapshot({"id": "1", "n": 2}) == '{"id":"1","n":2}'
    assert serialize_snapshot({"when": datetime(2026, 1, 1)}) == "{}"


def test_build_entry_packages_widget_create() -> None:
    entry = build_entry(
        table_name="widgets",
        operation=OperationType.CREATE,
        snapshot={"id": "42", "name": "a"},
        actor_id="alice@example.com",
    )

    assert entry.id is None
    assert entry.created_at is None
    assert entry.table_name == "widgets"
    assert entry.operation_type is OperationType.CREATE
    assert entry.object_id == "42"
    assert json.loads(entry.data) == {"id": "42", "name": "a"}
    assert entry.user_id == "alice@example.com"


def test_build_entry_with_empty_snapshot() -> None:
    """Dry-run captures still produce a well-formed entry."""
    entry = build_entry(
        table_name="widgets",
        operation=OperationType.DELETE,
        snapshot={},
        actor_id="ctx-nonspecified",
    )

    assert entry.object_id == ""
    assert entry.data == "{}"
    assert entry.operation_type.value == "DELETE"
