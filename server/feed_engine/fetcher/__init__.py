"""
feed_engine.fetcher — JSON retrieval for catalogs and external endpoints.

Public API:
    Fetcher       — protocol consumed by the registry and assembler
    FetchResult   — explicit per-URL outcome (ok + data, or error)
    RemoteFetcher — aiohttp implementation
"""
from .client import RemoteFetcher
from .interface import Fetcher, FetchResult

__all__ = [
    "Fetcher",
    "FetchResult",
    "RemoteFetcher",
]
