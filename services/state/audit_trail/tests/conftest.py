"""Shared fixtures for audit trail tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import Engine, create_engine, literal_column, select
from sqlalchemy.orm import Session, sessionmaker

from services.state.audit_trail.data.schema import audit_logs, metadata as audit_metadata
from services.state.audit_trail.identity import clear_actor
from services.state.audit_trail.service import AuditedSessionFactory, attach_audit
from services.state.audit_trail.tests.models import Base


@pytest.fixture(autouse=True)
def _reset_actor() -> Iterator[None]:
    """Keep the request-scoped actor from leaking between tests."""
    clear_actor()
    yield
    clear_actor()


@pytest.fixture
def app_engine(tmp_path: Path) -> Iterator[Engine]:
    """Provide a sqlite engine holding the audited business tables."""
    engine = create_engine(f"sqlite:///{tmp_path / 'app.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def audit_engine(tmp_path: Path) -> Iterator[Engine]:
    """Provide a separate sqlite engine holding the audit log table."""
    engine = create_engine(f"sqlite:///{tmp_path / 'audit.db'}")
    audit_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def audit_sessions(audit_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=audit_engine)


@pytest.fixture
def app_sessions(app_engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=app_engine)


@pytest.fixture
def audited(
    app_sessions: sessionmaker[Session],
    audit_sessions: sessionmaker[Session],
) -> Iterator[AuditedSessionFactory]:
    """Attach auditing to the business factory, writing to the audit engine."""
    handle = attach_audit(app_sessions, audit_session_factory=audit_sessions)
    yield handle
    handle.detach()


@pytest.fixture
def audit_rows(audit_engine: Engine):
    """Return a callable listing persisted audit rows in insertion order."""

    def _rows() -> list[dict[str, object]]:
        with audit_engine.connect() as conn:
            result = conn.execute(select(audit_logs).order_by(literal_column("rowid")))
            return [dict(row) for row in result.mappings()]

    return _rows
