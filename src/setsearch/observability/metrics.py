"""Prometheus metrics for index, remove and query operations."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import Counter, Histogram


if TYPE_CHECKING:
    from collections.abc import Generator


OPERATION_COUNT = Counter(
    "setsearch_operations_total",
    "Total index operations",
    ["namespace", "operation", "status"],
)

OPERATION_LATENCY = Histogram(
    "setsearch_operation_latency_seconds",
    "Index operation latency in seconds",
    ["namespace", "operation"],
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

POSTING_KEYS_WRITTEN = Counter(
    "setsearch_posting_keys_written_total",
    "Posting keys touched by index and remove batches",
    ["namespace", "operation"],
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)

