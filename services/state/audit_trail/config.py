"""Pydantic settings for audit trail behavior."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from packages.audit_shared.config import (
    AuditTrailRootSettings,
    resolve_component_settings,
)
from services.state.audit_trail.component import SERVICE_COMPONENT_ID

AUDIT_TABLE = "audit_logs"
UNSPECIFIED_ACTOR = "ctx-nonspecified"


class AuditTrailSettings(BaseModel):
    """Audit trail runtime behavior settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    audit_table: str = AUDIT_TABLE
    object_id_key: str = "id"
    unspecified_actor: str = UNSPECIFIED_ACTOR
    dry_run_info_key: str = "audit_trail.dry_run"

    @field_validator("audit_table", "object_id_key", "dry_run_info_key")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        """Reject blank names; they would silently disable the guards."""
        normalized = value.strip()
        if normalized == "":
            raise ValueError("value must be a non-empty string")
        return normalized


def resolve_audit_trail_settings(
    settings: AuditTrailRootSettings,
) -> AuditTrailSettings:
    """Resolve audit settings from ``components.service.audit_trail``."""
    return resolve_component_settings(
        settings=settings,
        component_id=SERVICE_COMPONENT_ID,
        model=AuditTrailSettings,
    )
