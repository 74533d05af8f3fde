"""Storage exception normalization for the audit store."""

from __future__ import annotations

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    ProgrammingError,
)

from packages.audit_shared.errors import (
    ErrorDetail,
    codes,
    conflict_error,
    dependency_error,
    exception_to_error,
)


def normalize_storage_error(exc: Exception) -> ErrorDetail:
    """Map a failed audit write into the shared error taxonomy.

    SQLAlchemy wrappers are matched by type. Raw driver exceptions (psycopg
    raises ``UniqueViolation`` and friends directly) are matched by name.
    """
    type_name = type(exc).__name__
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        driver_name = type(exc.orig).__name__
    else:
        driver_name = type_name
    metadata = {"exception_type": type_name}

    if (
        isinstance(exc, IntegrityError)
        or driver_name in {"UniqueViolation", "IntegrityError"}
        or "duplicate key value" in str(exc)
    ):
        return conflict_error(
            "audit row violates a store constraint",
            code=codes.ALREADY_EXISTS,
            metadata=metadata,
        )

    if isinstance(exc, OperationalError) or driver_name == "OperationalError":
        return dependency_error(
            "audit store unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            metadata=metadata,
        )

    if isinstance(exc, (InterfaceError, ProgrammingError)) or driver_name in {
        "InterfaceError",
        "ProgrammingError",
    }:
        return dependency_error(
            "audit store rejected the write",
            retryable=False,
            metadata=metadata,
        )

    return exception_to_error(exc)
