"""Domain contracts for audit trail entries and in-flight mutations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Mapper


class OperationType(str, Enum):
    """Mutation kinds recorded in the audit table."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditEntry(BaseModel):
    """Immutable record of one audited mutation.

    ``id`` and ``created_at`` stay ``None`` until the writer persists the entry;
    the store assigns ``created_at`` on insert.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str | None = None
    table_name: str
    operation_type: OperationType
    object_id: str = ""
    data: str = "{}"
    user_id: str
    created_at: datetime | None = Field(default=None)


@runtime_checkable
class AuditableEntity(Protocol):
    """Capability for entities that expose their own audit key."""

    def audit_primary_key(self) -> str:
        """Return the entity primary key as a string."""


@dataclass(frozen=True)
class InFlightMutation:
    """What the hooks know about one ORM mutation when they fire."""

    operation: OperationType
    table_name: str
    target: object
    mapper: Mapper[Any] | None
    info: Mapping[str, Any]
    failed: bool = False
    dry_run: bool = False
