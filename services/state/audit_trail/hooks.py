"""Session-event hooks that capture and persist audit entries.

Three capture listeners are attached to one session factory:

* CREATE runs on ``after_flush`` over ``session.new``: the INSERT has executed,
  so the row can be read back.
* UPDATE runs on ``after_flush`` over modified ``session.dirty``: the snapshot
  is the post-update row, not a diff.
* DELETE runs on ``before_flush`` over ``session.deleted``: the row still
  exists and is captured as it was immediately before removal.

Captured entries wait in ``Session.info`` until the business transaction ends.
``after_commit`` writes them through the isolated writer; a rollback (of the
whole transaction or of the savepoint they were captured under) drops them, so
a mutation that never committed is never audited. Nothing raised inside a
listener escapes to the flush or commit that triggered it.
"""

from __future__ import annotations

import weakref
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Connection, event, inspect
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session, SessionTransaction, sessionmaker

from packages.audit_shared.logging import fields, get_logger, log_context
from services.state.audit_trail.builder import build_entry
from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data.repository import (
    SKIP_HOOKS_INFO_KEY,
    AuditEntryWriter,
)
from services.state.audit_trail.domain import (
    AuditEntry,
    InFlightMutation,
    OperationType,
)
from services.state.audit_trail.errors import AuditRegistrationError, describe_failure
from services.state.audit_trail.identity import resolve_actor
from services.state.audit_trail.snapshot import primary_key_of, read_snapshot

logger = get_logger(__name__)

HOOK_NAMES: dict[OperationType, str] = {
    OperationType.CREATE: "audit_trail:create_audit_log",
    OperationType.UPDATE: "audit_trail:update_audit_log",
    OperationType.DELETE: "audit_trail:delete_audit_log",
}

_HOOK_EVENTS: dict[OperationType, str] = {
    OperationType.CREATE: "after_flush",
    OperationType.UPDATE: "after_flush",
    OperationType.DELETE: "before_flush",
}

PENDING_INFO_KEY = "audit_trail.pending"

# Hook names currently attached per session factory.
_REGISTERED: weakref.WeakKeyDictionary[Any, set[str]] = weakref.WeakKeyDictionary()


@dataclass(frozen=True)
class _PendingEntry:
    entry: AuditEntry
    transaction: SessionTransaction | None


class AuditHooks:
    """Audit dispatcher for one session factory."""

    def __init__(self, *, writer: AuditEntryWriter, settings: AuditTrailSettings) -> None:
        self._writer = writer
        self._settings = settings
        self._capture_listeners: tuple[tuple[OperationType, Callable[..., None]], ...] = (
            (OperationType.CREATE, self._on_create),
            (OperationType.UPDATE, self._on_update),
            (OperationType.DELETE, self._on_delete),
        )
        self._listeners: tuple[tuple[str, Callable[..., None]], ...] = (
            *((_HOOK_EVENTS[op], listener) for op, listener in self._capture_listeners),
            ("after_commit", self._on_commit),
            ("after_soft_rollback", self._on_soft_rollback),
            ("after_transaction_end", self._on_transaction_end),
        )

    @property
    def settings(self) -> AuditTrailSettings:
        """Return the settings this dispatcher was built with."""
        return self._settings

    def register(self, session_factory: sessionmaker[Session]) -> None:
        """Attach the audit listeners; raise ``AuditRegistrationError`` on failure."""
        names = _REGISTERED.setdefault(session_factory, set())
        for operation, _ in self._capture_listeners:
            if HOOK_NAMES[operation] in names:
                raise AuditRegistrationError(
                    f"hook {HOOK_NAMES[operation]} is already registered on this session factory"
                )

        attached: list[tuple[str, Callable[..., None]]] = []
        try:
            for event_name, listener in self._listeners:
                event.listen(session_factory, event_name, listener)
                attached.append((event_name, listener))
        except InvalidRequestError as exc:
            for event_name, listener in attached:
                event.remove(session_factory, event_name, listener)
            raise AuditRegistrationError(f"registering audit hooks failed: {exc}") from exc

        names.update(HOOK_NAMES.values())
        logger.info(
            "audit hooks registered",
            extra={"hooks": sorted(HOOK_NAMES.values())},
        )

    def unregister(self, session_factory: sessionmaker[Session]) -> None:
        """Detach the listeners previously attached with ``register``."""
        for event_name, listener in self._listeners:
            if event.contains(session_factory, event_name, listener):
                event.remove(session_factory, event_name, listener)
        names = _REGISTERED.get(session_factory)
        if names is not None:
            names.difference_update(HOOK_NAMES.values())

    def process(
        self,
        mutation: InFlightMutation,
        connect: Callable[[], Connection],
    ) -> AuditEntry | None:
        """Run guard, capture and build for one mutated entity.

        Returns the unpersisted entry to queue, or ``None`` when the invocation
        was skipped, failed, or is a dry run. Never raises.
        """
        if mutation.table_name == self._settings.audit_table:
            return None
        if mutation.failed:
            return None

        with log_context(
            {
                fields.AUDIT_TABLE: mutation.table_name,
                fields.AUDIT_OPERATION: mutation.operation.value,
                fields.AUDIT_OBJECT_ID: primary_key_of(
                    mutation.target, object_id_key=self._settings.object_id_key
                ),
            }
        ):
            try:
                snapshot = (
                    {}
                    if mutation.dry_run
                    else read_snapshot(
                        connect(),
                        mutation,
                        object_id_key=self._settings.object_id_key,
                    )
                )
            except Exception as exc:
                logger.warning(
                    "audit snapshot capture failed; no entry written: %s",
                    exc,
                    extra={
                        fields.STAGE: "capture",
                        **describe_failure(exc).log_fields(),
                    },
                )
                return None

            entry = build_entry(
                table_name=mutation.table_name,
                operation=mutation.operation,
                snapshot=snapshot,
                actor_id=resolve_actor(
                    mutation.info, unspecified=self._settings.unspecified_actor
                ),
                object_id_key=self._settings.object_id_key,
            )
            if mutation.dry_run:
                logger.debug("dry run; audit entry not persisted")
                return None
            return entry

    def persist(self, entry: AuditEntry) -> AuditEntry | None:
        """Write one entry through the isolated writer; ``None`` on failure."""
        with log_context(
            {
                fields.AUDIT_TABLE: entry.table_name,
                fields.AUDIT_OPERATION: entry.operation_type.value,
                fields.AUDIT_OBJECT_ID: entry.object_id,
            }
        ):
            try:
                stored = self._writer.append(entry)
            except Exception as exc:
                logger.error(
                    "audit entry write failed: %s",
                    exc,
                    exc_info=True,
                    extra={
                        fields.STAGE: "persist",
                        **describe_failure(exc).log_fields(),
                    },
                )
                return None

            logger.debug(
                "audit entry written", extra={fields.AUDIT_ENTRY_ID: stored.id}
            )
            return stored

    def _on_create(self, session: Session, flush_context: object) -> None:
        for target in list(session.new):
            self._dispatch(OperationType.CREATE, session, target)

    def _on_update(self, session: Session, flush_context: object) -> None:
        deleted = session.deleted
        for target in list(session.dirty):
            if target in deleted:
                continue
            if not session.is_modified(target, include_collections=False):
                continue
            self._dispatch(OperationType.UPDATE, session, target)

    def _on_delete(
        self, session: Session, flush_context: object, instances: object
    ) -> None:
        for target in list(session.deleted):
            self._dispatch(OperationType.DELETE, session, target)

    def _dispatch(self, operation: OperationType, session: Session, target: object) -> None:
        if session.info.get(SKIP_HOOKS_INFO_KEY):
            return
        state = inspect(target, raiseerr=False)
        mapper = getattr(state, "mapper", None)
        table_name = getattr(getattr(mapper, "local_table", None), "name", "")
        mutation = InFlightMutation(
            operation=operation,
            table_name=str(table_name or ""),
            target=target,
            mapper=mapper,
            info=session.info,
            failed=_transaction_failed(session),
            dry_run=bool(session.info.get(self._settings.dry_run_info_key)),
        )
        entry = self.process(mutation, session.connection)
        if entry is None:
            return
        session.info.setdefault(PENDING_INFO_KEY, []).append(
            _PendingEntry(entry=entry, transaction=_innermost_transaction(session))
        )

    def _on_commit(self, session: Session) -> None:
        # Releasing a savepoint also fires after_commit; wait for the root.
        if session.get_nested_transaction() is not None:
            return
        for pending in session.info.pop(PENDING_INFO_KEY, []):
            self.persist(pending.entry)

    def _on_soft_rollback(
        self, session: Session, previous_transaction: SessionTransaction
    ) -> None:
        pending: list[_PendingEntry] = session.info.get(PENDING_INFO_KEY, [])
        kept = [
            item
            for item in pending
            if not _within(item.transaction, previous_transaction)
        ]
        dropped = len(pending) - len(kept)
        if dropped:
            logger.debug("rolled back; %d pending audit entries dropped", dropped)
        if kept:
            session.info[PENDING_INFO_KEY] = kept
        else:
            session.info.pop(PENDING_INFO_KEY, None)

    def _on_transaction_end(
        self, session: Session, transaction: SessionTransaction
    ) -> None:
        # A root transaction that closed without committing leaves nothing to audit.
        if transaction.parent is None:
            session.info.pop(PENDING_INFO_KEY, None)


def _transaction_failed(session: Session) -> bool:
    """Return whether the session's transaction can no longer proceed.

    ``before_flush`` fires before the flush asserts the transaction is usable,
    so a session still holding a transaction deactivated by an earlier failed
    flush reaches the DELETE hook here. ``after_flush`` only fires once the
    statements ran, where this is always false.
    """
    transaction = session.get_transaction()
    return transaction is not None and not transaction.is_active


def _innermost_transaction(session: Session) -> SessionTransaction | None:
    return session.get_nested_transaction() or session.get_transaction()


def _within(
    transaction: SessionTransaction | None, ancestor: SessionTransaction
) -> bool:
    """Return whether ``transaction`` is ``ancestor`` or nested inside it."""
    if ancestor.parent is None:
        return True
    current = transaction
    while current is not None:
        if current is ancestor:
            return True
        current = current.parent
    return False
