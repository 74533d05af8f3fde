"""Isolated, hook-free write path for audit entries."""

from __future__ import annotations

from sqlalchemy import Table, insert
from sqlalchemy.orm import Session, sessionmaker

from packages.audit_shared.ids import generate_ulid_str
from resources.substrates.postgres.session import transactional_session
from services.state.audit_trail.config import AUDIT_TABLE
from services.state.audit_trail.data.schema import audit_logs, build_audit_table
from services.state.audit_trail.domain import AuditEntry

SKIP_HOOKS_INFO_KEY = "audit_trail.skip_hooks"


class AuditEntryWriter:
    """Append audit entries, one fresh transactional session per entry.

    Sessions opened here are flagged with ``SKIP_HOOKS_INFO_KEY`` so that even a
    factory that also carries audit hooks never audits its own writes, and
    they never join the transaction of the mutation being audited.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        table_name: str = AUDIT_TABLE,
    ) -> None:
        self._sessions = session_factory
        self._table: Table = (
            audit_logs if table_name == AUDIT_TABLE else build_audit_table(table_name)
        )

    @property
    def table(self) -> Table:
        """Return the audit table this writer inserts into."""
        return self._table

    def append(self, entry: AuditEntry) -> AuditEntry:
        """Persist one entry and return it with its generated id."""
        stored = entry.model_copy(update={"id": generate_ulid_str()})
        with transactional_session(self._sessions) as session:
            session.info[SKIP_HOOKS_INFO_KEY] = True
            session.execute(
                insert(self._table).values(
                    id=stored.id,
                    table_name=stored.table_name,
                    operation_type=stored.operation_type.value,
                    object_id=stored.object_id,
                    data=stored.data,
                    user_id=stored.user_id,
                )
            )
        return stored
