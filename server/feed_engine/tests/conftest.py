"""
Shared fixtures for feed_engine tests.

All network I/O goes through FakeFetcher and all persistence through
InMemoryKeyValueStore — no HTTP server or Redis required.
"""
import asyncio
import copy
from datetime import datetime, timezone

import pytest

from feed_engine.assembly import FeedAssembler
from feed_engine.config import AssetsConfig
from feed_engine.core.types import FetchError
from feed_engine.fetcher import FetchResult
from feed_engine.registry import SourceRegistry
from kv_store import InMemoryKeyValueStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

DEFAULTS_PATH = "/default_sources.json"


def catalog(category_id: str) -> str:
    return f"/sources/{category_id}/games.json"


def shipped(source_id: str, *, visible: bool = True, source_type: str = "category", **extra) -> dict:
    return {
        "id": source_id,
        "type": source_type,
        "url": catalog(source_id),
        "tag": source_id,
        "removable": False,
        "visible": visible,
        **extra,
    }


DEFAULTS_DOC = {
    "sources": [
        shipped("classicArcade"),
        shipped("boys"),
        shipped("learnItalian", visible=False),
        shipped("addGame", source_type="special"),
    ]
}


class FakeFetcher:
    """
    Fetcher stub: url -> document. Unknown urls fail with 404; a FetchError
    value fails with that error; any other exception value is raised.
    Optional per-url delays let tests control completion order.
    """

    def __init__(self, documents=None, *, delays=None):
        self.documents = dict(documents or {})
        self.delays = dict(delays or {})
        self.calls: list[str] = []

    async def fetch_json(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url in self.delays:
            await asyncio.sleep(self.delays[url])
        if url not in self.documents:
            return FetchResult.failure(FetchError("Not found", url=url, status=404))
        doc = self.documents[url]
        if isinstance(doc, FetchError):
            return FetchResult.failure(doc)
        if isinstance(doc, Exception):
            raise doc
        return FetchResult.success(url, copy.deepcopy(doc))

    def count(self, url: str) -> int:
        return self.calls.count(url)


# ── Fixtures ──────────────────────────────────────────────────────────────────

@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def fetcher():
    return FakeFetcher({DEFAULTS_PATH: DEFAULTS_DOC})


@pytest.fixture
def registry(store, fetcher):
    return SourceRegistry(store, fetcher, AssetsConfig())


@pytest.fixture
def clock():
    """Mutable clock: set clock.now to move time."""

    class _Clock:
        now = NOW

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def assembler(store, fetcher, registry, clock):
    return FeedAssembler(store, fetcher, registry, assets=AssetsConfig(), clock=clock)
