"""Per-invocation logging context carried in a ``ContextVar``.

The audit hooks run inline in whatever thread or task flushes the session, so
the context follows the flush rather than any global logger state.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from types import MappingProxyType
from typing import Iterator, Mapping

_EMPTY: Mapping[str, str] = MappingProxyType({})

_LOG_CONTEXT: ContextVar[Mapping[str, str]] = ContextVar(
    "audit_trail_log_context", default=_EMPTY
)


def get_context() -> dict[str, str]:
    """Return a copy of the fields bound in the current context."""
    return dict(_LOG_CONTEXT.get())


def _merged(values: Mapping[str, object]) -> Mapping[str, str]:
    """Overlay ``values`` on the current context, stringified, skipping ``None``."""
    current = dict(_LOG_CONTEXT.get())
    current.update(
        (str(key), str(value)) for key, value in values.items() if value is not None
    )
    return MappingProxyType(current)


def bind_context(**values: object) -> Token[Mapping[str, str]]:
    """Bind fields for the rest of the current context."""
    return _LOG_CONTEXT.set(_merged(values))


def clear_context(*keys: str) -> None:
    """Drop ``keys`` from the context, or every field when none are given."""
    if not keys:
        _LOG_CONTEXT.set(_EMPTY)
        return
    remaining = {k: v for k, v in _LOG_CONTEXT.get().items() if k not in keys}
    _LOG_CONTEXT.set(MappingProxyType(remaining))


@contextmanager
def log_context(values: Mapping[str, object]) -> Iterator[None]:
    """Bind ``values`` for the duration of a block."""
    token = _LOG_CONTEXT.set(_merged(values))
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)
