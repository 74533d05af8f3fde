"""Component identity for the Postgres substrate."""

from __future__ import annotations

RESOURCE_COMPONENT_ID = "substrate_postgres"
