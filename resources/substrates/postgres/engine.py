"""SQLAlchemy engine construction for a dedicated audit store."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine, make_url

from resources.substrates.postgres.config import PostgresSettings


def create_postgres_engine(config: PostgresSettings) -> Engine:
    """Build the pooled engine that audit entries are written through.

    libpq connection options are only passed to Postgres URLs, so a local
    SQLite audit store can reuse the same settings model.
    """
    connect_args: dict[str, object] = {}
    if make_url(config.url).get_backend_name() == "postgresql":
        connect_args = {
            "connect_timeout": int(config.connect_timeout_seconds),
            "sslmode": config.sslmode,
            "application_name": config.application_name,
        }
    return create_engine(
        config.url,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout_seconds,
        pool_pre_ping=config.pool_pre_ping,
        connect_args=connect_args,
    )
