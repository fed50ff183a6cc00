"""
Fetcher Protocol Definition

The assembler and registry depend only on this protocol: one async call per
URL that always returns a FetchResult. Transport failures are values, not
exceptions, so a gather over many sources can never be aborted by one of them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from feed_engine.core.types import FetchError


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching one URL."""

    url: str
    ok: bool
    data: Any = None
    status: Optional[int] = None
    error: Optional[FetchError] = None

    @classmethod
    def success(cls, url: str, data: Any, status: int = 200) -> FetchResult:
        return cls(url=url, ok=True, data=data, status=status)

    @classmethod
    def failure(cls, error: FetchError) -> FetchResult:
        return cls(url=error.url, ok=False, status=error.status, error=error)

    def items(self) -> list[Any]:
        """The payload when it is a JSON array, else an empty list."""
        if self.ok and isinstance(self.data, list):
            return self.data
        return []


@runtime_checkable
class Fetcher(Protocol):
    """Fetches and decodes a JSON document. No retries."""

    async def fetch_json(self, url: str) -> FetchResult:
        """Fetch *url* (absolute, or a path relative to the assets root)."""
        ...
