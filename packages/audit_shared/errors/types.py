"""Error shape used when audit failures are reported.

Audit failures never propagate to the mutation that triggered them, so this
shape exists mostly to give log lines a stable code and category.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from packages.audit_shared.logging import fields


class ErrorCategory(str, Enum):
    """Coarse failure classes."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ErrorDetail:
    """Normalized description of one failure."""

    code: str
    message: str
    category: ErrorCategory
    retryable: bool = False
    metadata: Mapping[str, str] = field(default_factory=dict)

    def log_fields(self) -> dict[str, object]:
        """Return the ``extra`` mapping used when logging this failure."""
        return {
            fields.ERROR_CODE: self.code,
            fields.ERROR_CATEGORY: self.category.value,
            fields.RETRYABLE: self.retryable,
        }
