"""
Redis Key-Value Store

Async get/set of JSON values backed by plain Redis string keys. Keys are
namespaced so several feeds (or test runs) can share one database. There is
no expiry: values live until overwritten.

Usage:
    store = RedisKeyValueStore(redis_url="redis://localhost:6379/0")
    await store.connect()

    await store.set("hasVisitedBefore", True)
    visited = await store.get("hasVisitedBefore")

    await store.close()

Context manager usage:
    async with RedisKeyValueStore(redis_url=...) as store:
        posts = await store.get("posts") or []
"""
from __future__ import annotations

import logging
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .serializer import StoreSerializationError, deserialize, serialize

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a store operation fails."""


class RedisKeyValueStore:
    """
    Persists JSON-serializable values under namespaced Redis keys.

    Args:
        redis_url: Redis connection URL (e.g. "redis://localhost:6379/0").
        namespace: Prefix prepended to every key (e.g. "gamefeed:").
    """

    def __init__(self, redis_url: str, namespace: str = "") -> None:
        self._redis_url = redis_url
        self._namespace = namespace
        self._redis: Redis | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the Redis connection."""
        self._redis = Redis.from_url(self._redis_url, decode_responses=False)
        try:
            await self._redis.ping()
            logger.info("RedisKeyValueStore connected to Redis at %s", self._redis_url)
        except RedisError as exc:
            raise StoreError(f"Cannot connect to Redis: {exc}") from exc

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("RedisKeyValueStore disconnected from Redis")

    async def __aenter__(self) -> RedisKeyValueStore:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    # ── Get / Set ─────────────────────────────────────────────────────────────

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> Any | None:
        """
        Read the value stored under key.

        Returns:
            The decoded value, or None if the key has never been set.

        Raises:
            StoreError: If not connected or Redis returns an error.
            StoreSerializationError: If the stored bytes cannot be decoded.
        """
        if self._redis is None:
            raise StoreError("RedisKeyValueStore is not connected — call connect() first")

        try:
            raw = await self._redis.get(self._full_key(key))
        except RedisError as exc:
            raise StoreError(f"Redis get failed for key '{key}'") from exc

        if raw is None:
            return None

        stored_key, value = deserialize(raw)
        if stored_key != key:
            raise StoreSerializationError(
                f"Value under '{key}' was written for '{stored_key}'"
            )
        return value

    async def set(self, key: str, value: Any) -> None:
        """
        Write value under key, replacing any previous value.

        Raises:
            StoreError: If not connected or Redis returns an error.
            StoreSerializationError: If value is not JSON-serializable.
        """
        if self._redis is None:
            raise StoreError("RedisKeyValueStore is not connected — call connect() first")

        payload = serialize(key, value)
        try:
            await self._redis.set(self._full_key(key), payload)
        except RedisError as exc:
            raise StoreError(f"Redis set failed for key '{key}'") from exc

        logger.debug("Stored '%s' (%d bytes)", key, len(payload))
