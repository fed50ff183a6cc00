"""
In-Memory Key-Value Store

dict-based implementation of the KeyValueStore protocol for local
development and tests. Values go through the same serializer as the Redis
store, so callers get a fresh copy on every get() and never share mutable
state with the store. Swap for RedisKeyValueStore with zero changes to
registry or assembler code.
"""
from __future__ import annotations

import logging
from typing import Any

from .serializer import deserialize, serialize

logger = logging.getLogger(__name__)


class InMemoryKeyValueStore:
    """Dev stub that satisfies KeyValueStore."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        self._writes: list[str] = []
        for key, value in (initial or {}).items():
            self._data[key] = serialize(key, value)

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        _, value = deserialize(raw)
        return value

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = serialize(key, value)
        self._writes.append(key)
        logger.debug(f"Stored {key}")

    # ------------------------------------------------------------------
    # Introspection (for tests)
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Return a decoded copy of every stored value."""
        return {key: deserialize(raw)[1] for key, raw in self._data.items()}

    @property
    def writes(self) -> list[str]:
        """Keys in the order they were written."""
        return list(self._writes)
