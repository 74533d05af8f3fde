"""Snapshot reads of the row behind an in-flight mutation.

Reads go through a Core ``SELECT`` on the caller's connection. Core statements
never fire ORM session or mapper events, so reading back a row cannot re-enter
the audit hooks, and running on the flush connection makes the just-written row
visible before the surrounding transaction commits.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Connection, Table, select
from sqlalchemy.exc import SQLAlchemyError

from services.state.audit_trail.domain import AuditableEntity, InFlightMutation
from services.state.audit_trail.errors import SnapshotError


def primary_key_of(target: object, *, object_id_key: str = "id") -> str:
    """Return the string primary key of an entity, or ``""`` when unknown."""
    if isinstance(target, AuditableEntity):
        value: object = target.audit_primary_key()
    else:
        value = getattr(target, object_id_key, None)
    return value if isinstance(value, str) else ""


def read_snapshot(
    connection: Connection,
    mutation: InFlightMutation,
    *,
    object_id_key: str = "id",
) -> dict[str, Any]:
    """Return the persisted row for ``mutation`` as a plain field map.

    Failed and dry-run mutations yield ``{}`` without touching storage. A
    missing row, a read fault, or an unencodable value raises ``SnapshotError``.
    """
    if mutation.failed or mutation.dry_run:
        return {}

    table = _table_of(mutation)
    column = table.c.get(object_id_key)
    if column is None:
        raise SnapshotError(f"table {table.name} has no {object_id_key!r} column")

    key = primary_key_of(mutation.target, object_id_key=object_id_key)
    try:
        row = (
            connection.execute(select(table).where(column == key))
            .mappings()
            .first()
        )
    except SQLAlchemyError as exc:
        raise SnapshotError(f"reading {table.name} row {key!r} failed: {exc}") from exc

    if row is None:
        raise SnapshotError(f"{table.name} row {key!r} not found")
    return to_field_map(row)


def to_field_map(row: Mapping[str, Any]) -> dict[str, Any]:
    """Convert a typed row into a JSON-safe dict via an encode/decode pass."""
    try:
        encoded = json.dumps(dict(row), default=str)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"row is not JSON encodable: {exc}") from exc
    decoded = json.loads(encoded)
    if not isinstance(decoded, dict):
        raise SnapshotError("row did not decode to an object")
    return decoded


def _table_of(mutation: InFlightMutation) -> Table:
    """Return the mapped table for the mutation's entity."""
    local_table = mutation.mapper.local_table if mutation.mapper is not None else None
    if not isinstance(local_table, Table):
        raise SnapshotError(f"{mutation.table_name or 'entity'} is not mapped to a table")
    return local_table
