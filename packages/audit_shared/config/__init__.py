"""Public API for shared audit trail configuration utilities."""

from .models import (
    CONFIG_PATH_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    AuditTrailRootSettings,
    ComponentsSettings,
    LoggingSettings,
    config_path,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "CONFIG_PATH_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "AuditTrailRootSettings",
    "ComponentsSettings",
    "LoggingSettings",
    "config_path",
    "load_settings",
    "resolve_component_settings",
]
