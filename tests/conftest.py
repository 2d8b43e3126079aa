"""Shared test fixtures and configuration."""

import os

import fakeredis
import pytest

from setsearch.search.analyzers import Normalizer
from setsearch.search.index import IndexHandle
from setsearch.search.store import RedisSetStore


# Complete test environment that overrides every config value
TEST_ENV = {
    "REDIS_URL": "redis://localhost:6399/15",
    "REDIS_SOCKET_TIMEOUT": "2",
    "CJK_SEGMENTATION": "true",
    "JIEBA_DICTIONARY": "",
    "LOG_LEVEL": "info",
    "LOG_JSON": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin test defaults for every test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def redis_client():
    """Isolated in-process Redis."""
    client = fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    client.close()


@pytest.fixture
def store(redis_client):
    return RedisSetStore(redis_client)


@pytest.fixture
def normalizer():
    return Normalizer()


@pytest.fixture
def handle(store, normalizer):
    with IndexHandle("posts", store, normalizer=normalizer) as index:
        yield index
