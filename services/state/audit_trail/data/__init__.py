"""Audit log table definition and writer."""

from services.state.audit_trail.data.repository import (
    SKIP_HOOKS_INFO_KEY,
    AuditEntryWriter,
)
from services.state.audit_trail.data.schema import audit_logs, build_audit_table, metadata

__all__ = [
    "SKIP_HOOKS_INFO_KEY",
    "AuditEntryWriter",
    "audit_logs",
    "build_audit_table",
    "metadata",
]
