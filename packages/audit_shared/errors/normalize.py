"""Fallback mapping from arbitrary exceptions to ``ErrorDetail``."""

from __future__ import annotations

from . import codes
from .factories import dependency_error, make_error
from .types import ErrorCategory, ErrorDetail


def exception_to_error(exc: Exception) -> ErrorDetail:
    """Classify ``exc`` by its builtin base class.

    Storage-aware callers try their own mapping first and fall back here.
    """
    metadata = {"exception_type": type(exc).__name__}
    message = str(exc)

    if isinstance(exc, TimeoutError):
        return dependency_error(
            message or "dependency timeout",
            code=codes.DEPENDENCY_TIMEOUT,
            metadata=metadata,
        )
    if isinstance(exc, ConnectionError):
        return dependency_error(
            message or "dependency unavailable",
            code=codes.DEPENDENCY_UNAVAILABLE,
            metadata=metadata,
        )
    if isinstance(exc, (TypeError, ValueError)):
        return make_error(ErrorCategory.VALIDATION, message, metadata=metadata)
    if isinstance(exc, LookupError):
        return make_error(ErrorCategory.NOT_FOUND, message, metadata=metadata)
    return make_error(
        ErrorCategory.INTERNAL, message or "unexpected exception", metadata=metadata
    )
