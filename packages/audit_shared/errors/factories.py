"""Constructors for ``ErrorDetail`` values."""

from __future__ import annotations

from typing import Mapping

from . import codes
from .types import ErrorCategory, ErrorDetail

_DEFAULT_CODES: dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: codes.INVALID_ARGUMENT,
    ErrorCategory.NOT_FOUND: codes.RESOURCE_NOT_FOUND,
    ErrorCategory.CONFLICT: codes.ALREADY_EXISTS,
    ErrorCategory.DEPENDENCY: codes.DEPENDENCY_FAILURE,
    ErrorCategory.INTERNAL: codes.UNEXPECTED_EXCEPTION,
}


def make_error(
    category: ErrorCategory,
    message: str,
    *,
    code: str | None = None,
    retryable: bool = False,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Build an ``ErrorDetail``, defaulting the code from the category."""
    return ErrorDetail(
        code=code or _DEFAULT_CODES[category],
        message=message,
        category=category,
        retryable=retryable,
        metadata=dict(metadata or {}),
    )


def conflict_error(
    message: str,
    *,
    code: str | None = None,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    return make_error(ErrorCategory.CONFLICT, message, code=code, metadata=metadata)


def dependency_error(
    message: str,
    *,
    code: str | None = None,
    retryable: bool = True,
    metadata: Mapping[str, str] | None = None,
) -> ErrorDetail:
    """Storage or other collaborator failure; retryable unless stated."""
    return make_error(
        ErrorCategory.DEPENDENCY,
        message,
        code=code,
        retryable=retryable,
        metadata=metadata,
    )
