"""Session lifecycle helpers for audit store access."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker


def create_session_factory(
    engine: Engine, *, info: Mapping[str, object] | None = None
) -> sessionmaker[Session]:
    """Create a session factory bound to the provided SQLAlchemy engine.

    ``info`` seeds every produced session's ``Session.info`` mapping.
    """
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
        info=dict(info or {}),
    )


@contextmanager
def transactional_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Yield a session and enforce commit/rollback semantics."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
