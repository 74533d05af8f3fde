"""Actor identity resolution from the ambient operation context.

Hosts publish the acting principal either per session, under
``ACTOR_CONTEXT_KEY`` in ``Session.info``, or per request through
``bind_actor`` / ``actor_scope``. The request-scoped slot is a ``ContextVar`` so
it follows the call chain without touching function signatures and stays
isolated between threads and tasks.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar

from packages.audit_shared.logging import get_logger
from services.state.audit_trail.config import UNSPECIFIED_ACTOR

logger = get_logger(__name__)


class ContextKey(str):
    """Typed key for values carried in an operation context mapping."""


ACTOR_CONTEXT_KEY = ContextKey("email")

_ACTOR: ContextVar[str | None] = ContextVar("audit_trail_actor", default=None)


def bind_actor(actor_id: str | None) -> None:
    """Set the request-scoped actor for subsequent audited mutations."""
    _ACTOR.set(actor_id or None)


def clear_actor() -> None:
    """Forget the request-scoped actor."""
    _ACTOR.set(None)


def current_actor() -> str | None:
    """Return the request-scoped actor, if one is bound."""
    return _ACTOR.get()


@contextmanager
def actor_scope(actor_id: str) -> Iterator[None]:
    """Bind an actor for the duration of a block."""
    token = _ACTOR.set(actor_id or None)
    try:
        yield
    finally:
        _ACTOR.reset(token)


def resolve_actor(
    context: Mapping[str, object] | None = None,
    *,
    unspecified: str = UNSPECIFIED_ACTOR,
) -> str:
    """Return the acting principal for an audited mutation.

    The explicit ``context`` mapping wins over the request-scoped actor. Only
    non-empty strings count: an actor stored as ``""`` (or as a non-string)
    is treated as missing, logged, and replaced by ``unspecified``. A missing
    actor never blocks the mutation.
    """
    if context is not None:
        value = context.get(ACTOR_CONTEXT_KEY)
        if isinstance(value, str) and value:
            return value

    ambient = _ACTOR.get()
    if ambient:
        return ambient

    logger.warning(
        "actor not specified in context, please specify actor for audit purposes"
    )
    return unspecified
