"""Observability helpers: structured logging, index context and Prometheus metrics."""

from setsearch.observability.context import get_index_context, operation_context, set_index_context
from setsearch.observability.logging import JsonFormatter, configure_logging, configure_logging_from_settings
from setsearch.observability.metrics import (
    OPERATION_COUNT,
    OPERATION_LATENCY,
    POSTING_KEYS_WRITTEN,
    track_latency,
)


__all__ = [
    "OPERATION_COUNT",
    "OPERATION_LATENCY",
    "POSTING_KEYS_WRITTEN",
    "JsonFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "get_index_context",
    "operation_context",
    "set_index_context",
    "track_latency",
]
