"""Unit tests for the per-mutation audit procedure."""

from __future__ import annotations

import json
import logging

from sqlalchemy import Connection, Engine, create_engine, inspect
from sqlalchemy.orm import Session, sessionmaker

from services.state.audit_trail.builder import build_entry
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data.repository import AuditEntryWriter
from services.state.audit_trail.domain import InFlightMutation, OperationType
from services.state.audit_trail.hooks import HOOK_NAMES, AuditHooks
from services.state.audit_trail.identity import ACTOR_CONTEXT_KEY
from services.state.audit_trail.tests.models import AuditLogRecord, Widget


class _RecordingWriter(AuditEntryWriter):
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        super().__init__(session_factory)
        self.appended = []

    def append(self, entry):
        stored = super().append(entry)
        self.appended.append(stored)
        return stored


def _never_connect() -> Connection:
    raise AssertionError("storage must not be touched")


def _mutation(target: object, **overrides: object) -> InFlightMutation:
    mapper = inspect(type(target))
    values: dict[str, object] = {
        "operation": OperationType.CREATE,
        "table_name": mapper.local_table.name,
        "target": target,
        "mapper": mapper,
        "info": {ACTOR_CONTEXT_KEY: "alice@example.com"},
    }
    values.update(overrides)
    return InFlightMutation(**values)


def _hooks(audit_sessions: sessionmaker[Session]) -> tuple[AuditHooks, _RecordingWriter]:
    writer = _RecordingWriter(audit_sessions)
    return AuditHooks(writer=writer, settings=AuditTrailSettings()), writer


def test_hook_names_are_stable() -> None:
    assert HOOK_NAMES == {
        OperationType.CREATE: "audit_trail:create_audit_log",
        OperationType.UPDATE: "audit_trail:update_audit_log",
        OperationType.DELETE: "audit_trail:delete_audit_log",
    }


def test_process_builds_entry_and_persist_writes_it(
    app_engine: Engine,
    audit_sessions: sessionmaker[Session],
    audit_rows,
) -> None:
    """Capture builds a draft; only ``persist`` touches the audit store."""
    hooks, writer = _hooks(audit_sessions)
    with app_engine.begin() as conn:
        conn.execute(Widget.__table__.insert().values(id="42", name="a"))
        draft = hooks.process(_mutation(Widget(id="42", name="a")), lambda: conn)

    assert draft is not None
    assert draft.id is None
    assert audit_rows() == []

    stored = hooks.persist(draft)

    assert stored is not None
    assert stored.id is not None and len(stored.id) == 26
    assert writer.appended == [stored]
    rows = audit_rows()
    assert len(rows) == 1
    assert rows[0]["id"] == stored.id
    assert rows[0]["operation_type"] == "CREATE"
    assert rows[0]["user_id"] == "alice@example.com"
    assert json.loads(rows[0]["data"]) == {"id": "42", "name": "a"}
    assert rows[0]["created_at"] is not None


def test_persist_failure_is_logged_and_swallowed(tmp_path, caplog) -> None:
    broken = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    hooks, writer = _hooks(sessionmaker(bind=broken))
    draft = build_entry(
        table_name="widgets",
        operation=OperationType.UPDATE,
        snapshot={"id": "42", "name": "b"},
        actor_id="alice@example.com",
    )

    with caplog.at_level(logging.ERROR):
        assert hooks.persist(draft) is None
    broken.dispose()

    assert writer.appended == []
    failure = next(r for r in caplog.records if "audit entry write failed" in r.getMessage())
    assert getattr(failure, "stage", None) == "persist"
    assert getattr(failure, "error_category", None) == "dependency"



def test_failed_transaction_is_skipped_before_capture(
    audit_sessions: sessionmaker[Session],
) -> None:
    hooks, writer = _hooks(audit_sessions)

    result = hooks.process(_mutation(Widget(id="1", name="a"), failed=True), _never_connect)

    assert result is None
    assert writer.appended == []


def test_audit_table_is_never_audited(audit_sessions: sessionmaker[Session]) -> None:
    hooks, writer = _hooks(audit_sessions)
    record = AuditLogRecord(id="01J0000000000000000000000A", table_name="widgets")

    assert hooks.process(_mutation(record), _never_connect) is None
    assert writer.appended == []


def test_capture_failure_is_logged_and_swallowed(
    app_engine: Engine,
    audit_sessions: sessionmaker[Session],
    caplog,
) -> None:
    hooks, writer = _hooks(audit_sessions)

    with caplog.at_level(logging.WARNING), app_engine.connect() as conn:
        result = hooks.process(_mutation(Widget(id="missing", name="a")), lambda: conn)

    assert result is None
    assert writer.appended == []
    assert any(
        "audit snapshot capture failed" in record.getMessage()
        and getattr(record, "error_code", None) == "SNAPSHOT_READ_FAILED"
        for record in caplog.records
    )


def test_dry_run_builds_without_persisting(
    audit_sessions: sessionmaker[Session],
    audit_rows,
    caplog,
) -> None:
    hooks, writer = _hooks(audit_sessions)

    with caplog.at_level(logging.DEBUG):
        result = hooks.process(_mutation(Widget(id="1", name="a"), dry_run=True), _never_connect)

    assert result is None
    assert writer.appended == []
    assert audit_rows() == []
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
    assert any("dry run" in r.getMessage() for r in caplog.records)
