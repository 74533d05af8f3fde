"""Audit trail: opt-in auditing of ORM create/update/delete operations."""

from services.state.audit_trail.config import AuditTrailSettings
from services.state.audit_trail.data import AuditEntryWriter, audit_logs
from services.state.audit_trail.domain import (
    AuditableEntity,
    AuditEntry,
    InFlightMutation,
    OperationType,
)
from services.state.audit_trail.errors import (
    AuditError,
    AuditRegistrationError,
    SnapshotError,
)
from services.state.audit_trail.hooks import HOOK_NAMES, AuditHooks
from services.state.audit_trail.identity import (
    ACTOR_CONTEXT_KEY,
    ContextKey,
    actor_scope,
    bind_actor,
    clear_actor,
    current_actor,
    resolve_actor,
)
from services.state.audit_trail.service import (
    AuditedSessionFactory,
    attach_audit,
    attach_audit_from_settings,
)

__all__ = [
    "ACTOR_CONTEXT_KEY",
    "HOOK_NAMES",
    "AuditEntry",
    "AuditEntryWriter",
    "AuditError",
    "AuditHooks",
    "AuditRegistrationError",
    "AuditTrailSettings",
    "AuditableEntity",
    "AuditedSessionFactory",
    "ContextKey",
    "InFlightMutation",
    "OperationType",
    "SnapshotError",
    "actor_scope",
    "attach_audit",
    "attach_audit_from_settings",
    "audit_logs",
    "bind_actor",
    "clear_actor",
    "current_actor",
    "resolve_actor",
]
