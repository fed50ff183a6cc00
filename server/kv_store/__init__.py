"""
kv_store — Generic async key-value persistence primitives.

Public API:
    KeyValueStore         — protocol consumed by the feed engine
    RedisKeyValueStore    — Redis-backed store (namespaced JSON values)
    InMemoryKeyValueStore — dict-backed store for development and tests
    serialize             — encode (key, value) -> JSON string
    deserialize           — decode JSON string -> (key, value)
"""
from .interface import KeyValueStore
from .memory import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore, StoreError
from .serializer import StoreSerializationError, deserialize, serialize

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "StoreError",
    "StoreSerializationError",
    "serialize",
    "deserialize",
]
