"""Audit trail exception types and component-local error codes."""

from __future__ import annotations

from packages.audit_shared.errors import ErrorCategory, ErrorDetail, make_error
from resources.substrates.postgres.errors import normalize_storage_error

SNAPSHOT_READ_FAILED = "SNAPSHOT_READ_FAILED"
AUDIT_WRITE_FAILED = "AUDIT_WRITE_FAILED"
HOOK_ALREADY_REGISTERED = "HOOK_ALREADY_REGISTERED"


class AuditError(Exception):
    """Base class for audit trail failures."""

    code = "AUDIT_ERROR"


class SnapshotError(AuditError):
    """The mutated row could not be read back or converted to a field map."""

    code = SNAPSHOT_READ_FAILED


class AuditRegistrationError(AuditError):
    """Attaching the audit hooks to a session factory failed."""

    code = HOOK_ALREADY_REGISTERED


def describe_failure(exc: Exception) -> ErrorDetail:
    """Normalize an exception raised while capturing or persisting an entry."""
    if isinstance(exc, SnapshotError):
        category = (
            ErrorCategory.DEPENDENCY
            if isinstance(exc.__cause__, Exception)
            else ErrorCategory.NOT_FOUND
        )
        return make_error(category, str(exc), code=exc.code)
    detail = normalize_storage_error(exc)
    if detail.category is ErrorCategory.INTERNAL:
        return make_error(
            ErrorCategory.INTERNAL,
            detail.message,
            code=AUDIT_WRITE_FAILED,
            metadata=detail.metadata,
        )
    return detail
