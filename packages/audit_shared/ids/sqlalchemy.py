"""SQLAlchemy helpers for ULID-backed primary keys."""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Column, String

from .ulid import ULID_STRING_LENGTH


def ulid_primary_key_column(
    name: str = "id",
    *,
    length_constraint_name: str | None = None,
) -> Column[str]:
    """Return a standard ULID primary-key column definition.

    Stores the canonical 26-character string with a length check so the column
    stays portable across Postgres and SQLite.
    """
    constraint = CheckConstraint(
        f"length({name}) = {ULID_STRING_LENGTH}",
        name=length_constraint_name or f"ck_{name}_ulid_26",
    )
    return Column(
        name,
        String(ULID_STRING_LENGTH),
        constraint,
        primary_key=True,
        nullable=False,
    )
