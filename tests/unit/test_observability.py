"""Unit tests for logging, index context and metrics."""

import json
import logging

from prometheus_client import REGISTRY
import pytest

from setsearch.config import Settings
from setsearch.observability import (
    OPERATION_COUNT,
    OPERATION_LATENCY,
    JsonFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_index_context,
    operation_context,
    set_index_context,
    track_latency,
)
from setsearch.observability.context import index_context
from setsearch.search.schema import Document


pytestmark = pytest.mark.unit


def _record(msg="test message", **extra):
    record = logging.LogRecord(
        name="setsearch.search.indexer",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record()))
        assert data["message"] == "test message"
        assert data["level"] == "INFO"
        assert data["component"] == "indexer"
        assert "namespace" not in data

    def test_includes_index_context(self):
        with operation_context("posts", "remove", doc_id="D1"):
            data = json.loads(JsonFormatter().format(_record()))
        assert data["namespace"] == "posts"
        assert data["operation"] == "remove"
        assert data["doc_id"] == "D1"

    def test_redacts_secrets_and_serializes_sets(self):
        data = json.loads(JsonFormatter().format(_record(password="hunter2", keys={"b", "a"})))
        assert data["password"] == "[REDACTED]"
        assert data["keys"] == ["a", "b"]

    def test_truncates_long_messages(self):
        data = json.loads(JsonFormatter().format(_record("x" * 3000)))
        assert data["message"].endswith("...")
        assert len(data["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3


class TestContext:
    def test_operation_context_resets(self):
        assert get_index_context() == {}
        with operation_context("posts", "query"):
            assert get_index_context()["operation"] == "query"
        assert get_index_context() == {}

    def test_set_index_context(self):
        token = index_context.set(None)
        try:
            set_index_context("posts", "index", doc_id="7")
            assert get_index_context() == {"namespace": "posts", "operation": "index", "doc_id": "7"}
        finally:
            index_context.reset(token)


def test_configure_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug", json_output=True, logger_levels={"setsearch.search.store": "error"})
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("setsearch.search.store").level == logging.ERROR
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


@pytest.mark.parametrize(("json_output", "formatter_type"), [(True, JsonFormatter), (False, logging.Formatter)])
def test_configure_logging_from_settings_applies_level_and_format(json_output, formatter_type):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging_from_settings(Settings(log_level="WARNING", log_json=json_output))
        assert root.level == logging.WARNING
        assert type(root.handlers[0].formatter) is formatter_type
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_track_latency_observes_histogram():
    labels = {"namespace": "metrics-test", "operation": "query"}
    before = REGISTRY.get_sample_value("setsearch_operation_latency_seconds_count", labels) or 0.0
    with track_latency(OPERATION_LATENCY, **labels):
        pass
    assert REGISTRY.get_sample_value("setsearch_operation_latency_seconds_count", labels) == before + 1


def test_handle_operations_are_counted(handle):
    before = OPERATION_COUNT.labels(namespace="posts", operation="index", status="ok")._value.get()
    handle.index(Document(id="M1", text="alpha"))
    after = OPERATION_COUNT.labels(namespace="posts", operation="index", status="ok")._value.get()
    assert after == before + 1
