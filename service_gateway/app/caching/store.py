"""
Key-value store adapters shared by the response cache and the rate limit breaker.

Values are opaque JSON documents. Every operation is a suspension point and
may fail with ``StoreError`` (connectivity or timeout), which is distinct from
``KeyNotFoundError`` raised by ``get`` when the key is absent.
"""

import asyncio
import json
import math
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import SerializationError, StoreError
from shared.logging import get_logger

MEMORY_URL_SCHEME = "memory://"

# Redis TTL replies for a missing key and for a key without expiry.
TTL_MISSING = -2
TTL_PERSISTENT = -1

_STORE_FAILURES = (RedisError, OSError, asyncio.TimeoutError)


class KeyNotFoundError(LookupError):
    """Raised by ``KeyValueStore.get`` when the key does not exist."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key not found: {key}")


class KeyValueStore(ABC):
    """TTL-capable key-value store holding JSON values."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def get(self, key: str) -> Any:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds, ``-1`` without expiry, ``-2`` when missing."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


def _dumps(key: str, value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            "Value is not JSON serializable",
            details={"key": key, "error": str(exc)},
        ) from exc


def _loads(key: str, raw: Any) -> Any:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            "Stored value is not valid JSON",
            details={"key": key, "error": str(exc)},
        ) from exc


class RedisStore(KeyValueStore):
    """Store backed by Redis through a pooled asyncio client."""

    def __init__(
        self,
        redis_url: str,
        *,
        max_connections: int = 50,
        socket_timeout: float = 5.0,
    ):
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self.logger = get_logger("gateway.store")
        self._redis: Optional[redis.Redis] = None

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection.

        Callers beyond ``max_connections`` wait up to ``socket_timeout`` for a
        free connection instead of failing.
        """
        if self._redis is None:
            pool = redis.BlockingConnectionPool.from_url(
                self.redis_url,
                max_connections=self.max_connections,
                timeout=self.socket_timeout,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )
            self._redis = redis.Redis.from_pool(pool)
        return self._redis

    def _failure(self, operation: str, key: str, exc: Exception) -> StoreError:
        self.logger.error("Store operation failed", operation=operation, key=key, error=str(exc))
        return StoreError(
            f"Key-value store {operation} failed",
            details={"operation": operation, "key": key, "error": str(exc)},
        )

    async def exists(self, key: str) -> bool:
        try:
            redis_client = await self._get_redis()
            return bool(await redis_client.exists(key))
        except _STORE_FAILURES as exc:
            raise self._failure("exists", key, exc) from exc

    async def get(self, key: str) -> Any:
        try:
            redis_client = await self._get_redis()
            raw = await redis_client.get(key)
        except _STORE_FAILURES as exc:
            raise self._failure("get", key, exc) from exc

        if raw is None:
            raise KeyNotFoundError(key)
        return _loads(key, raw)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        payload = _dumps(key, value)
        try:
            redis_client = await self._get_redis()
            if ttl is not None and ttl > 0:
                await redis_client.set(key, payload, ex=ttl)
            else:
                await redis_client.set(key, payload)
        except _STORE_FAILURES as exc:
            raise self._failure("set", key, exc) from exc

        self.logger.debug("Stored value", key=key, ttl=ttl)

    async def ttl(self, key: str) -> int:
        try:
            redis_client = await self._get_redis()
            return int(await redis_client.ttl(key))
        except _STORE_FAILURES as exc:
            raise self._failure("ttl", key, exc) from exc

    async def ping(self) -> bool:
        try:
            redis_client = await self._get_redis()
            return bool(await redis_client.ping())
        except _STORE_FAILURES as exc:
            raise self._failure("ping", "", exc) from exc

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


class InMemoryStore(KeyValueStore):
    """Single-process store for local runs and tests.

    State is not shared between workers, so it cannot coordinate rate limit
    windows across processes the way Redis does.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self.logger = get_logger("gateway.store")

    def _live(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return entry

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def get(self, key: str) -> Any:
        entry = self._live(key)
        if entry is None:
            raise KeyNotFoundError(key)
        return _loads(key, entry[0])

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None and ttl > 0 else None
        self._data[key] = (_dumps(key, value), expires_at)

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return TTL_MISSING
        _, expires_at = entry
        if expires_at is None:
            return TTL_PERSISTENT
        return int(math.ceil(expires_at - self._clock()))


def create_store(
    url: str,
    *,
    max_connections: int = 50,
    socket_timeout: float = 5.0,
) -> KeyValueStore:
    """Create the store for a connection string. ``memory://`` selects the in-process store."""
    if url.startswith(MEMORY_URL_SCHEME):
        return InMemoryStore()
    return RedisStore(url, max_connections=max_connections, socket_timeout=socket_timeout)
