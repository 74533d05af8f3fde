"""Shared error taxonomy for audit trail failure reporting."""

from . import codes
from .factories import conflict_error, dependency_error, make_error
from .normalize import exception_to_error
from .types import ErrorCategory, ErrorDetail

__all__ = [
    "ErrorCategory",
    "ErrorDetail",
    "codes",
    "conflict_error",
    "dependency_error",
    "exception_to_error",
    "make_error",
]
