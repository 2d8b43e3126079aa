"""Unit tests for the redis-backed set store adapter."""

from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError

from setsearch.config import Settings
from setsearch.errors import StoreError
from setsearch.search.store import RedisSetStore, create_store


pytestmark = pytest.mark.unit


class TestRedisSetStore:
    def test_set_primitives(self, store):
        store.sadd("k1", "a", "b")
        store.sadd("k2", "b", "c")
        assert store.smembers("k1") == {"a", "b"}
        assert store.sinter(["k1", "k2"]) == {"b"}
        assert store.sunion(["k1", "k2"]) == {"a", "b", "c"}
        assert store.srem("k1", "a") == 1
        assert store.exists("k1")
        assert store.delete("k1") == 1
        assert not store.exists("k1")

    def test_missing_key_is_empty_set(self, store):
        assert store.smembers("nope") == set()
        assert store.sinter(["nope", "also-nope"]) == set()

    def test_batch_applies_all_operations(self, store, redis_client):
        redis_client.sadd("old", "x")
        batch = store.batch()
        batch.sadd("k", "1").sadd("k", "2").srem("k", "1").delete("old")
        batch.execute()
        assert redis_client.smembers("k") == {"2"}
        assert not redis_client.exists("old")

    def test_empty_batch_is_not_sent(self):
        client = Mock()
        store = RedisSetStore(client)
        assert store.batch().sadd("k").execute() == []
        client.pipeline.return_value.execute.assert_not_called()

    def test_bytes_members_are_decoded(self):
        client = Mock()
        client.smembers.return_value = {b"a", "b"}
        assert RedisSetStore(client).smembers("k") == {"a", "b"}

    def test_command_errors_become_store_errors(self):
        client = Mock()
        cause = RedisConnectionError("connection refused")
        client.sinter.side_effect = cause
        with pytest.raises(StoreError, match="SINTER") as excinfo:
            RedisSetStore(client).sinter(["a", "b"])
        assert excinfo.value.cause is cause
        assert excinfo.value.__cause__ is cause

    def test_batch_errors_become_store_errors_and_reset_pipeline(self):
        client = Mock()
        pipeline = client.pipeline.return_value
        pipeline.execute.side_effect = ResponseError("WRONGTYPE")
        batch = RedisSetStore(client).batch().sadd("k", "1")
        with pytest.raises(StoreError, match="EXEC"):
            batch.execute()
        client.pipeline.assert_called_once_with(transaction=True)
        pipeline.reset.assert_called_once()

    def test_close_only_closes_owned_client(self):
        client = Mock()
        RedisSetStore(client).close()
        client.close.assert_not_called()
        RedisSetStore(client, owns_client=True).close()
        client.close.assert_called_once()


def test_create_store_from_settings(monkeypatch):
    calls = {}

    def fake_from_url(url, **kwargs):
        calls["url"] = url
        calls.update(kwargs)
        return Mock()

    monkeypatch.setattr("setsearch.search.store.redis.Redis.from_url", fake_from_url)
    store = create_store(Settings(redis_url="redis://cache:6379/2", redis_socket_timeout=1.5))
    assert store.owns_client
    assert calls == {"url": "redis://cache:6379/2", "socket_timeout": 1.5, "decode_responses": True}
