"""Component identity for the audit trail service."""

from __future__ import annotations

SERVICE_COMPONENT_ID = "service_audit_trail"
