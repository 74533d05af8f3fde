"""Registration entry point attaching auditing to a session factory."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from packages.audit_shared.config import AuditTrailRootSettings
from packages.audit_shared.logging import get_logger
from resources.substrates.postgres.config import resolve_postgres_settings
from resources.substrates.postgres.engine import create_postgres_engine
from resources.substrates.postgres.session import create_session_factory
from services.state.audit_trail.config import (
    AuditTrailSettings,
    resolve_audit_trail_settings,
)
from services.state.audit_trail.data.repository import (
    SKIP_HOOKS_INFO_KEY,
    AuditEntryWriter,
)
from services.state.audit_trail.errors import AuditRegistrationError
from services.state.audit_trail.hooks import AuditHooks

logger = get_logger(__name__)


class AuditedSessionFactory:
    """A session factory with audit hooks attached.

    Calling the handle produces sessions exactly like the wrapped factory; the
    hooks live on that factory until ``detach`` is called.
    """

    def __init__(self, session_factory: sessionmaker[Session], hooks: AuditHooks) -> None:
        self._session_factory = session_factory
        self._hooks = hooks

    def __call__(self, **local_kw: Any) -> Session:
        return self._session_factory(**local_kw)

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Return the wrapped session factory."""
        return self._session_factory

    @property
    def hooks(self) -> AuditHooks:
        """Return the attached audit dispatcher."""
        return self._hooks

    def detach(self) -> None:
        """Remove the audit hooks from the wrapped factory."""
        self._hooks.unregister(self._session_factory)
        logger.info("audit hooks detached")


def attach_audit(
    session_factory: sessionmaker[Session],
    *,
    audit_session_factory: sessionmaker[Session] | None = None,
    settings: AuditTrailSettings | None = None,
) -> AuditedSessionFactory:
    """Attach create/update/delete auditing to ``session_factory``.

    Audit rows are written through ``audit_session_factory`` when given,
    otherwise through a fresh factory on the same engine as
    ``session_factory``. Raises ``AuditRegistrationError`` when the hooks
    cannot be registered.
    """
    resolved = settings or AuditTrailSettings()
    writer_sessions = audit_session_factory or _isolated_session_factory(session_factory)
    hooks = AuditHooks(
        writer=AuditEntryWriter(writer_sessions, table_name=resolved.audit_table),
        settings=resolved,
    )
    hooks.register(session_factory)
    return AuditedSessionFactory(session_factory, hooks)


def attach_audit_from_settings(
    session_factory: sessionmaker[Session],
    settings: AuditTrailRootSettings,
    *,
    dedicated_store: bool = False,
) -> AuditedSessionFactory:
    """Attach auditing using component settings from the root configuration.

    With ``dedicated_store`` the audit rows go to the engine described by
    ``components.substrate.postgres`` instead of the audited database.
    """
    audit_sessions = None
    if dedicated_store:
        engine = create_postgres_engine(resolve_postgres_settings(settings))
        audit_sessions = create_session_factory(engine, info={SKIP_HOOKS_INFO_KEY: True})
    return attach_audit(
        session_factory,
        audit_session_factory=audit_sessions,
        settings=resolve_audit_trail_settings(settings),
    )


def _isolated_session_factory(session_factory: sessionmaker[Session]) -> sessionmaker[Session]:
    """Build a hook-free factory on the engine behind ``session_factory``."""
    bind = session_factory.kw.get("bind")
    if bind is None:
        raise AuditRegistrationError(
            "session factory has no bind; pass audit_session_factory explicitly"
        )
    return create_session_factory(bind.engine, info={SKIP_HOOKS_INFO_KEY: True})
