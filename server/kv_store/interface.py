"""
Store Protocol Definition

Abstract interface that both the in-memory dev stub and the Redis-backed
store satisfy. The source registry and feed assembler depend only on this
protocol.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Async get/set of JSON-serializable values by string key, no expiry."""

    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or None if it was never set."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*, replacing any previous value."""
        ...
