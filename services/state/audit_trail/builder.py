"""Pure assembly of audit entries from captured snapshots."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from services.state.audit_trail.domain import AuditEntry, OperationType


def object_id_from(snapshot: Mapping[str, Any], key: str = "id") -> str:
    """Return ``snapshot[key]`` when it is a string, else ``""``."""
    value = snapshot.get(key)
    return value if isinstance(value, str) else ""


def serialize_snapshot(snapshot: Mapping[str, Any]) -> str:
    """Encode a snapshot as compact JSON object text; ``"{}"`` on failure."""
    try:
        return json.dumps(dict(snapshot), separators=(",", ":"))
    except (TypeError, ValueError):
        return "{}"


def build_entry(
    *,
    table_name: str,
    operation: OperationType,
    snapshot: Mapping[str, Any],
    actor_id: str,
    object_id_key: str = "id",
) -> AuditEntry:
    """Assemble an unpersisted ``AuditEntry``; performs no I/O."""
    return AuditEntry(
        table_name=table_name,
        operation_type=operation,
        object_id=object_id_from(snapshot, object_id_key),
        data=serialize_snapshot(snapshot),
        user_id=actor_id,
    )
