"""SQLAlchemy table definition for the append-only audit log.

The physical table is created by the host's migrations; this definition only
describes the columns the writer inserts into.
"""

from __future__ import annotations

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, func

from packages.audit_shared.ids import ulid_primary_key_column
from services.state.audit_trail.config import AUDIT_TABLE

metadata = MetaData()


def build_audit_table(name: str = AUDIT_TABLE, *, target: MetaData | None = None) -> Table:
    """Return the audit log table under ``name`` in ``target`` metadata."""
    return Table(
        name,
        target if target is not None else MetaData(),
        ulid_primary_key_column("id", length_constraint_name=f"ck_{name}_id_ulid"),
        Column("table_name", String(255), nullable=False),
        Column("operation_type", String(16), nullable=False),
        Column("object_id", String(255), nullable=False, server_default=""),
        Column("data", Text, nullable=False, server_default="{}"),
        Column("user_id", String(255), nullable=False),
        Column(
            "created_at",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


audit_logs = build_audit_table(AUDIT_TABLE, target=metadata)
