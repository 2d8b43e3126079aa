"""Exception types raised by the indexing and query engine."""

from __future__ import annotations


class SetSearchError(Exception):
    """Base class for all setsearch errors."""


class ConfigError(SetSearchError, ValueError):
    """Raised when an index is created with a missing or invalid namespace or schema."""


class StoreError(SetSearchError, RuntimeError):
    """Raised when the set store rejects or fails an operation.

    The original client exception is kept on ``cause`` (and chained as
    ``__cause__``) so callers can inspect connectivity vs. command failures.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
