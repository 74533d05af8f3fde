"""Shared ULID primitives for audit entry identifiers."""

from packages.audit_shared.ids.sqlalchemy import ulid_primary_key_column
from packages.audit_shared.ids.ulid import (
    ULID_STRING_LENGTH,
    generate_ulid_str,
    ulid_timestamp_ms,
)

__all__ = [
    "ULID_STRING_LENGTH",
    "generate_ulid_str",
    "ulid_primary_key_column",
    "ulid_timestamp_ms",
]
