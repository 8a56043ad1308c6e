"""Redis cache backend implementing ICacheBackend."""

from __future__ import annotations

from typing import Callable, TypeVar

import redis

from loanflow.core.config import RedisConfig
from loanflow.core.exceptions import CacheError

T = TypeVar("T")


class RedisCacheBackend:
    """Production ICacheBackend backed by Redis.

    Every key is stored under ``<namespace>:`` so LoanFlow can share a Redis
    database with other services.
    """

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 namespace: str = "loanflow") -> None:
        self._namespace = namespace
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisCacheBackend:
        return cls(host=config.host, port=config.port, db=config.db, namespace=config.namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key

    def _call(self, command: str, key: str, fn: Callable[[str], T]) -> T:
        try:
            return fn(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Redis {command} failed for key={key!r}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._call("GET", key, self._client.get)

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._call("SETEX", key, lambda k: self._client.setex(k, ttl, value))

    def delete(self, key: str) -> None:
        self._call("DELETE", key, self._client.delete)

    def close(self) -> None:
        self._client.close()
