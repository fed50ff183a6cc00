"""
Remote JSON Fetcher

aiohttp client for catalog documents, external endpoints, the default-sources
document and container child lists. Paths starting with "/" or "./" are
resolved against the assets base URL; absolute URLs are used as-is.

Usage:
    fetcher = RemoteFetcher(base_url="https://boink.example")
    await fetcher.connect()
    result = await fetcher.fetch_json("/sources/boys/games.json")
    await fetcher.close()

Context manager usage:
    async with RemoteFetcher(base_url=...) as fetcher:
        result = await fetcher.fetch_json(url)
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional
from urllib.parse import urljoin

import aiohttp

from feed_engine.core.types import FetchError
from feed_engine.fetcher.interface import FetchResult

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class RemoteFetcher:
    """
    Fetches JSON documents over HTTP.

    Every failure mode (connection error, timeout, non-2xx status, body not
    decodable in its declared charset, invalid JSON) is returned as a failed
    FetchResult and logged; nothing is retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            base_url: Root that relative catalog paths are resolved against.
            timeout: Total per-request timeout in seconds; None keeps the
                aiohttp default.
        """
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the HTTP session."""
        if self._timeout is not None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        else:
            self._session = aiohttp.ClientSession()
        logger.info("RemoteFetcher ready", extra={"base_url": self._base_url})

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> RemoteFetcher:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    # ── Fetch ─────────────────────────────────────────────────────────────────

    def resolve(self, url: str) -> str:
        """Resolve a catalog path against the base URL; absolute URLs pass through."""
        if url.startswith(("http://", "https://")):
            return url
        path = url[2:] if url.startswith("./") else url.lstrip("/")
        return urljoin(self._base_url, path)

    async def fetch_json(self, url: str) -> FetchResult:
        """
        Fetch and decode one JSON document.

        Raises:
            RuntimeError: If the fetcher was never connected.
        """
        if self._session is None:
            raise RuntimeError("RemoteFetcher is not connected — call connect() first")

        target = self.resolve(url)
        try:
            async with self._session.get(target, headers=NO_CACHE_HEADERS) as resp:
                if resp.status < 200 or resp.status >= 300:
                    return self._failed(
                        FetchError(f"HTTP {resp.status}", url=url, status=resp.status)
                    )
                raw = await resp.read()
                charset = resp.charset or "utf-8"
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            return self._failed(FetchError(f"Request failed: {exc!r}", url=url))

        try:
            data = json.loads(raw.decode(charset))
        except (UnicodeDecodeError, LookupError) as exc:
            return self._failed(FetchError(f"Invalid encoding: {exc}", url=url, status=status))
        except json.JSONDecodeError as exc:
            return self._failed(FetchError(f"Invalid JSON: {exc}", url=url, status=status))

        logger.debug("Fetched %s", target, extra={"status": status})
        return FetchResult.success(url, data, status=status)

    @staticmethod
    def _failed(error: FetchError) -> FetchResult:
        logger.warning(
            "Fetch failed",
            extra={"url": error.url, "status": error.status, "error": error.message},
        )
        return FetchResult.failure(error)
