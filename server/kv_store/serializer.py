"""
Value Serializer

Converts between Python values and the JSON strings stored under each key.
kv_store is intentionally decoupled from feed_engine models — it operates on
plain JSON-compatible values. Callers convert Source/Post objects to dicts
before handing off here.

Wire format (envelope):
  {
    "key": "allNewsSources",
    "value": [ ...anything JSON... ]
  }

Carrying the key in the envelope lets a reader detect values that were
written under a different name (e.g. after a namespace change).
"""
from __future__ import annotations

import json
from typing import Any


class StoreSerializationError(Exception):
    """Raised when serialization or deserialization fails."""


def serialize(key: str, value: Any) -> str:
    """
    Encode a key and value into a JSON string for storage.

    Unlike a pub/sub payload, stored values must survive a round trip
    unchanged, so non-JSON values are rejected rather than coerced to str.

    Raises StoreSerializationError if encoding fails.
    """
    try:
        return json.dumps({"key": key, "value": value}, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise StoreSerializationError(f"Failed to serialize value for '{key}': {exc}") from exc


def deserialize(raw: str | bytes) -> tuple[str, Any]:
    """
    Decode a stored JSON string into (key, value).

    Raises StoreSerializationError if decoding fails or the envelope is malformed.
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        envelope = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StoreSerializationError(f"Failed to deserialize stored value: {exc}") from exc

    if not isinstance(envelope, dict) or "key" not in envelope or "value" not in envelope:
        got = list(envelope.keys()) if isinstance(envelope, dict) else type(envelope).__name__
        raise StoreSerializationError(
            f"Malformed value envelope — expected {{key, value}}, got: {got}"
        )

    return envelope["key"], envelope["value"]
