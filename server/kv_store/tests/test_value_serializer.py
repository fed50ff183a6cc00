"""
Tests for kv_store.serializer

Pure unit tests — no Redis, no mocking required.
"""
import json

import pytest

from kv_store.serializer import StoreSerializationError, deserialize, serialize


class TestSerialize:
    def test_roundtrip_nested_value(self):
        value = [{"id": "classicArcade", "visible": True, "removable": False}]

        raw = serialize("allNewsSources", value)
        key, returned = deserialize(raw)

        assert key == "allNewsSources"
        assert returned == value

    def test_roundtrip_with_bytes(self):
        """deserialize() must accept bytes as well as str."""
        raw = serialize("shownTutorialDate", "2026-10-19").encode("utf-8")

        key, value = deserialize(raw)

        assert key == "shownTutorialDate"
        assert value == "2026-10-19"

    def test_non_serializable_raises(self):
        """Stored values must round-trip, so non-JSON objects are rejected."""
        from datetime import datetime

        with pytest.raises(StoreSerializationError, match="Failed to serialize"):
            serialize("posts", {"ts": datetime(2024, 1, 1)})

    def test_nan_is_rejected(self):
        with pytest.raises(StoreSerializationError):
            serialize("weights", [float("nan")])

    def test_serialize_produces_valid_envelope(self):
        envelope = json.loads(serialize("hasVisitedBefore", True))

        assert envelope == {"key": "hasVisitedBefore", "value": True}


class TestDeserialize:
    def test_invalid_json_raises(self):
        with pytest.raises(StoreSerializationError, match="Failed to deserialize"):
            deserialize("not valid json {{{{")

    def test_undecodable_bytes_raise(self):
        with pytest.raises(StoreSerializationError, match="Failed to deserialize"):
            deserialize(b'{"key": "posts", "value": "\xff\xfe"}')

    def test_missing_value_raises(self):
        with pytest.raises(StoreSerializationError, match="Malformed"):
            deserialize(json.dumps({"key": "posts"}))

    def test_json_array_raises(self):
        with pytest.raises(StoreSerializationError, match="Malformed"):
            deserialize(json.dumps([{"key": "posts", "value": []}]))

    def test_json_null_raises(self):
        with pytest.raises(StoreSerializationError, match="Malformed"):
            deserialize("null")
