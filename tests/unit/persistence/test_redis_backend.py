"""Unit tests for RedisCacheBackend using fakeredis."""

from __future__ import annotations

from unittest.mock import patch

import fakeredis
import pytest

from loanflow.core.config import RedisConfig
from loanflow.core.exceptions import CacheError
from loanflow.persistence.redis_backend import RedisCacheBackend


@pytest.fixture
def fake_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_client(fake_server):
    return fakeredis.FakeRedis(server=fake_server, decode_responses=True)


@pytest.fixture
def backend(fake_client):
    with patch("redis.Redis", return_value=fake_client):
        return RedisCacheBackend(host="localhost", port=6379, db=0)


class TestGet:
    def test_returns_none_on_miss(self, backend):
        assert backend.get("loan_state:1001") is None

    def test_returns_stored_value(self, backend):
        backend.setex("loan_state:1001", 300, "TX")
        assert backend.get("loan_state:1001") == "TX"


class TestSetex:
    def test_keys_are_namespaced_and_expire(self, backend, fake_client):
        backend.setex("loan_state:1001", 60, "TX")
        assert fake_client.get("loanflow:loan_state:1001") == "TX"
        assert 0 < fake_client.ttl("loanflow:loan_state:1001") <= 60

    def test_overwrites_existing_value(self, backend):
        backend.setex("k", 60, "old")
        backend.setex("k", 60, "new")
        assert backend.get("k") == "new"


class TestDelete:
    def test_removes_existing_key(self, backend):
        backend.setex("del_me", 60, "val")
        backend.delete("del_me")
        assert backend.get("del_me") is None

    def test_noop_on_missing_key(self, backend):
        backend.delete("never_existed")


class TestErrorWrapping:
    def test_get_wraps_connection_error(self, backend, fake_server):
        fake_server.connected = False
        with pytest.raises(CacheError, match="Redis GET failed"):
            backend.get("k")

    def test_setex_wraps_connection_error(self, backend, fake_server):
        fake_server.connected = False
        with pytest.raises(CacheError):
            backend.setex("k", 60, "v")


def test_from_config_uses_namespace(fake_client):
    with patch("redis.Redis", return_value=fake_client):
        backend = RedisCacheBackend.from_config(RedisConfig(namespace="uat"))
    backend.setex("loan_state:1", 60, "TX")
    assert fake_client.get("uat:loan_state:1") == "TX"
