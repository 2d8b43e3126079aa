"""Context propagation so log records carry the index they were emitted for."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar


index_context: ContextVar[dict | None] = ContextVar("index_context", default=None)


def get_index_context() -> dict:
    """Return the current index context (empty when outside an operation)."""
    return index_context.get() or {}


def set_index_context(namespace: str, operation: str, **extra: object) -> None:
    """Set index context for the current thread or task."""
    index_context.set({"namespace": namespace, "operation": operation, **extra})


@contextmanager
def operation_context(namespace: str, operation: str, **extra: object) -> Iterator[None]:
    """Scope the index context to a single index/remove/query call."""
    token = index_context.set({"namespace": namespace, "operation": operation, **extra})
    try:
        yield
    finally:
        index_context.reset(token)
