"""Set store adapter.

The engine only needs a handful of set primitives plus an atomic multi-key
batch. ``SetStore`` names that contract; ``RedisSetStore`` implements it over
redis-py, running batches as ``MULTI``/``EXEC`` pipelines. Client errors are
re-raised as :class:`~setsearch.errors.StoreError` and never retried here;
timeouts belong to the client configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Protocol

import redis
from redis.exceptions import RedisError

from setsearch.errors import StoreError


if TYPE_CHECKING:
    from setsearch.config import Settings


logger = logging.getLogger(__name__)


class SetBatch(Protocol):
    """Queued set mutations executed all-or-nothing."""

    def sadd(self, key: str, *members: str) -> SetBatch:  # pragma: no cover - interface definition
        ...

    def srem(self, key: str, *members: str) -> SetBatch:  # pragma: no cover - interface definition
        ...

    def delete(self, *keys: str) -> SetBatch:  # pragma: no cover - interface definition
        ...

    def execute(self) -> list:  # pragma: no cover - interface definition
        ...


class SetStore(Protocol):
    """Capabilities the engine requires from the key-value/set store."""

    def batch(self) -> SetBatch:  # pragma: no cover - interface definition
        ...

    def sadd(self, key: str, *members: str) -> int:  # pragma: no cover - interface definition
        ...

    def srem(self, key: str, *members: str) -> int:  # pragma: no cover - interface definition
        ...

    def smembers(self, key: str) -> set[str]:  # pragma: no cover - interface definition
        ...

    def sinter(self, keys: Sequence[str]) -> set[str]:  # pragma: no cover - interface definition
        ...

    def sunion(self, keys: Sequence[str]) -> set[str]:  # pragma: no cover - interface definition
        ...

    def exists(self, key: str) -> bool:  # pragma: no cover - interface definition
        ...

    def delete(self, *keys: str) -> int:  # pragma: no cover - interface definition
        ...

    def close(self) -> None:  # pragma: no cover - interface definition
        ...


def _decode(members: Iterable[str | bytes]) -> set[str]:
    return {m.decode("utf-8") if isinstance(m, bytes) else m for m in members}


@contextmanager
def _translate_errors(command: str) -> Iterator[None]:
    try:
        yield
    except RedisError as exc:
        msg = f"Store command {command} failed: {exc}"
        raise StoreError(msg, cause=exc) from exc


class RedisSetBatch:
    """``MULTI``/``EXEC`` pipeline with the ``SetBatch`` surface."""

    def __init__(self, pipeline: redis.client.Pipeline) -> None:
        self._pipeline = pipeline
        self.size = 0

    def sadd(self, key: str, *members: str) -> RedisSetBatch:
        if members:
            self._pipeline.sadd(key, *members)
            self.size += 1
        return self

    def srem(self, key: str, *members: str) -> RedisSetBatch:
        if members:
            self._pipeline.srem(key, *members)
            self.size += 1
        return self

    def delete(self, *keys: str) -> RedisSetBatch:
        if keys:
            self._pipeline.delete(*keys)
            self.size += 1
        return self

    def execute(self) -> list:
        if not self.size:
            return []
        try:
            with _translate_errors("EXEC"):
                return self._pipeline.execute()
        finally:
            self._pipeline.reset()


class RedisSetStore:
    """Set store backed by a single shared redis-py client.

    The client (and its connection pool) is reused by every operation and may
    be shared across threads. ``owns_client`` decides whether :meth:`close`
    also closes the client.
    """

    def __init__(self, client: redis.Redis, *, owns_client: bool = False) -> None:
        self.client = client
        self.owns_client = owns_client

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float | None = None) -> RedisSetStore:
        client = redis.Redis.from_url(url, socket_timeout=socket_timeout, decode_responses=True)
        return cls(client, owns_client=True)

    def batch(self) -> RedisSetBatch:
        return RedisSetBatch(self.client.pipeline(transaction=True))

    def sadd(self, key: str, *members: str) -> int:
        with _translate_errors("SADD"):
            return self.client.sadd(key, *members)

    def srem(self, key: str, *members: str) -> int:
        with _translate_errors("SREM"):
            return self.client.srem(key, *members)

    def smembers(self, key: str) -> set[str]:
        with _translate_errors("SMEMBERS"):
            return _decode(self.client.smembers(key))

    def sinter(self, keys: Sequence[str]) -> set[str]:
        with _translate_errors("SINTER"):
            return _decode(self.client.sinter(list(keys)))

    def sunion(self, keys: Sequence[str]) -> set[str]:
        with _translate_errors("SUNION"):
            return _decode(self.client.sunion(list(keys)))

    def exists(self, key: str) -> bool:
        with _translate_errors("EXISTS"):
            return bool(self.client.exists(key))

    def delete(self, *keys: str) -> int:
        with _translate_errors("DEL"):
            return self.client.delete(*keys)

    def close(self) -> None:
        if self.owns_client:
            logger.debug("Closing owned redis client")
            self.client.close()


def create_store(settings: Settings) -> RedisSetStore:
    """Build the default store from settings; construct once and share."""
    return RedisSetStore.from_url(settings.redis_url, socket_timeout=settings.redis_socket_timeout)
