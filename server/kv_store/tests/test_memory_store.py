"""
Tests for kv_store.memory
"""
import pytest

from kv_store import InMemoryKeyValueStore, KeyValueStore, StoreSerializationError


async def test_missing_key_returns_none():
    store = InMemoryKeyValueStore()
    assert await store.get("posts") is None


async def test_set_then_get_returns_equal_copy():
    store = InMemoryKeyValueStore()
    posts = [{"id": "tutorial-1", "reactions": ["a"]}]

    await store.set("posts", posts)
    posts[0]["reactions"].append("mutated after set")
    loaded = await store.get("posts")
    loaded.append({"id": "mutated after get"})

    assert await store.get("posts") == [{"id": "tutorial-1", "reactions": ["a"]}]


async def test_initial_values_are_readable():
    store = InMemoryKeyValueStore({"hasVisitedBefore": True})
    assert await store.get("hasVisitedBefore") is True


async def test_non_json_value_rejected():
    store = InMemoryKeyValueStore()
    with pytest.raises(StoreSerializationError):
        await store.set("posts", {1, 2})


async def test_writes_and_snapshot_track_history():
    store = InMemoryKeyValueStore()
    await store.set("a", 1)
    await store.set("b", [2])
    await store.set("a", 3)

    assert store.writes == ["a", "b", "a"]
    assert store.snapshot() == {"a": 3, "b": [2]}


def test_satisfies_protocol():
    assert isinstance(InMemoryKeyValueStore(), KeyValueStore)
