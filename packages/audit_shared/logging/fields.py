"""Canonical logging field names for cross-component consistency.

These constants define a stable key set for structured logs and context
propagation. Keeping names centralized prevents drift between the audit hooks,
the audit writer, and future observability integrations.
"""

TIMESTAMP = "timestamp"
LEVEL = "level"
LOGGER = "logger"
MESSAGE = "message"
EVENT = "event"

# Audit invocation fields.
AUDIT_TABLE = "audit_table"
AUDIT_OPERATION = "audit_operation"
AUDIT_OBJECT_ID = "audit_object_id"
AUDIT_ENTRY_ID = "audit_entry_id"
ACTOR = "actor"
ERROR_CODE = "error_code"
ERROR_CATEGORY = "error_category"
STAGE = "stage"
RETRYABLE = "retryable"

# Common service-level fields.
SERVICE = "service"
ENVIRONMENT = "environment"
