"""
Feed Assembler

Main orchestrator for one feed pass:

    first-run seeding -> parallel fetch -> compose -> identify -> dedup
        -> quality filter -> weight & order -> tutorial placement -> fallback

The output is the ordered list of Posts handed to the rendering layer. The
selection card is always at index 0. No single failure aborts a pass:
unreachable sources contribute nothing, bad dates get the default weight,
and best-effort writes are logged and skipped.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from kv_store import KeyValueStore, StoreError, StoreSerializationError

from feed_engine import keys
from feed_engine.assembly.history import CenteredHistory
from feed_engine.assembly.quality import is_valid_post
from feed_engine.assembly.ranking import apply_weights, rank_posts
from feed_engine.assembly.synthetic import (
    DEFAULT_CATEGORY_ITEM_TYPE,
    SELECTION_CARD_ID,
    create_fallback_post,
    create_selection_card,
    create_tutorial_post,
    is_tutorial,
)
from feed_engine.config import AssetsConfig
from feed_engine.core.types import FetchError
from feed_engine.fetcher import Fetcher, FetchResult
from feed_engine.models.post import Post, derive_post_id, normalize_post
from feed_engine.registry import SelectedSources, SourceRegistry
from feed_engine.registry.defaults import migrate_category_id

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def today_key(now: datetime) -> str:
    """Calendar-day marker, e.g. "2026-3-7" (no zero padding)."""
    return f"{now.year}-{now.month}-{now.day}"


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class SourceContribution:
    """What one selected source added to a pass."""

    kind: str  # "external" | "category"
    origin: str  # url for externals, category id for categories
    result: FetchResult
    posts: list[Post]


@dataclass
class AssemblyStats:
    """Statistics for the assembler."""

    passes: int = 0
    sources_fetched: int = 0
    sources_failed: int = 0
    posts_duplicate: int = 0
    posts_rejected: int = 0


class FeedAssembler:
    """
    Builds the ordered post sequence for one rendering pass.

    Not re-entrant: a call to assemble() while a pass is in flight joins
    that pass instead of starting a second one, so the one-time flags
    (first visit, tutorial shown today) are never raced.
    """

    def __init__(
        self,
        store: KeyValueStore,
        fetcher: Fetcher,
        registry: SourceRegistry,
        *,
        assets: Optional[AssetsConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._registry = registry
        self._assets = assets or AssetsConfig()
        self._clock = clock or _local_now
        self._history = CenteredHistory(store)
        self._stats = AssemblyStats()
        self._inflight: Optional[asyncio.Future[list[Post]]] = None
        self._last_contributions: list[SourceContribution] = []

    @property
    def stats(self) -> AssemblyStats:
        return self._stats

    @property
    def history(self) -> CenteredHistory:
        return self._history

    @property
    def last_contributions(self) -> list[SourceContribution]:
        """Per-source outcomes of the most recent pass, in selection order."""
        return list(self._last_contributions)

    async def mark_centered(self, post: Union[Post, Mapping[str, Any]]) -> Optional[str]:
        """Rendering-layer callback: a post reached the center of the viewport."""
        return await self._history.mark_centered(post)

    # ── Entry point ───────────────────────────────────────────────────────────

    async def assemble(self) -> list[Post]:
        if self._inflight is not None and not self._inflight.done():
            logger.info("Assembly already in progress, joining the running pass")
            return list(await asyncio.shield(self._inflight))

        self._inflight = asyncio.ensure_future(self._assemble())
        return list(await self._inflight)

    async def _assemble(self) -> list[Post]:
        self._stats.passes += 1

        await self._seed_first_visit()

        stored = await self._store.get(keys.LOCAL_POSTS)
        local_raw = stored if isinstance(stored, list) else []

        selected = await self._registry.get_selected_sources()
        contributions = await self._fetch_sources(selected)
        self._last_contributions = contributions

        local_posts = [p for p in (normalize_post(raw) for raw in local_raw) if p is not None]
        external_posts = [p for c in contributions if c.kind == "external" for p in c.posts]
        category_posts = [p for c in contributions if c.kind == "category" for p in c.posts]

        candidates = [create_selection_card(), *external_posts, *category_posts, *local_posts]
        for post in candidates:
            if not post.id:
                post.id = derive_post_id(post)

        unique = self._deduplicate(candidates)
        valid = [p for p in unique if is_valid_post(p)]
        self._stats.posts_rejected += len(unique) - len(valid)

        selection = next(p for p in valid if p.id == SELECTION_CARD_ID)
        others = [p for p in valid if p.id != SELECTION_CARD_ID]

        now = self._clock()
        history = await self._history.load()
        apply_weights(others, history, now)
        ranked = await self._place_tutorial(rank_posts(others), now)

        if not ranked:
            logger.info("No posts survived filtering, showing fallback")
            ranked = [create_fallback_post()]

        feed = [selection, *ranked]
        logger.info(
            "Feed assembled",
            extra={
                "candidates": len(candidates),
                "unique": len(unique),
                "valid": len(valid),
                "feed": len(feed),
                "categories": len(selected.categories),
                "externals": len(selected.external),
            },
        )
        return feed

    # ── Steps ─────────────────────────────────────────────────────────────────

    async def _seed_first_visit(self) -> None:
        """Prepend the tutorial to local posts, once ever."""
        if await self._store.get(keys.HAS_VISITED_BEFORE):
            return

        stored = await self._store.get(keys.LOCAL_POSTS)
        local = stored if isinstance(stored, list) else []
        local.insert(0, create_tutorial_post().to_dict())
        await self._store.set(keys.LOCAL_POSTS, local)
        await self._store.set(keys.HAS_VISITED_BEFORE, True)
        logger.info("First visit: tutorial seeded into local posts")

    async def _fetch_sources(self, selected: SelectedSources) -> list[SourceContribution]:
        """
        Fetch every selected source concurrently.

        gather() preserves argument order, so results are matched back to
        their source by index regardless of completion order.
        """
        externals = list(selected.external)
        categories = [migrate_category_id(c) for c in selected.categories]

        urls = [*externals, *(self._assets.catalog_path(c) for c in categories)]
        outcomes = await asyncio.gather(
            *(self._fetcher.fetch_json(url) for url in urls),
            return_exceptions=True,
        )
        results = [self._as_result(url, outcome) for url, outcome in zip(urls, outcomes)]
        external_results = results[: len(externals)]
        category_results = results[len(externals):]

        contributions: list[SourceContribution] = []
        for url, result in zip(externals, external_results):
            posts = self._collect(result, origin=url)
            contributions.append(SourceContribution("external", url, result, posts))

        for category, result in zip(categories, category_results):
            posts = self._collect(
                result,
                origin=category,
                tag=category,
                default_type=DEFAULT_CATEGORY_ITEM_TYPE,
            )
            contributions.append(SourceContribution("category", category, result, posts))

        return contributions

    @staticmethod
    def _as_result(url: str, outcome: Union[FetchResult, BaseException]) -> FetchResult:
        """A fetcher that raises counts as a failed fetch for that source only."""
        if isinstance(outcome, FetchResult):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        return FetchResult.failure(FetchError(f"Fetcher raised: {outcome!r}", url=url))

    def _collect(
        self,
        result: FetchResult,
        *,
        origin: str,
        tag: Optional[str] = None,
        default_type: Optional[str] = None,
    ) -> list[Post]:
        self._stats.sources_fetched += 1
        if not result.ok:
            self._stats.sources_failed += 1
            logger.warning(
                "Could not load source",
                extra={"origin": origin, "error": str(result.error)},
            )
            return []
        if not isinstance(result.data, list):
            logger.warning(
                "Source did not return a list of items",
                extra={"origin": origin, "payload_type": type(result.data).__name__},
            )
            return []

        posts = []
        for raw in result.items():
            post = normalize_post(raw, tag=tag, default_type=default_type)
            if post is not None:
                posts.append(post)
        return posts

    def _deduplicate(self, posts: list[Post]) -> list[Post]:
        """First occurrence of each id wins; posts without an id are dropped."""
        seen: set[str] = set()
        unique: list[Post] = []
        for post in posts:
            if not post.id:
                continue
            if post.id in seen:
                self._stats.posts_duplicate += 1
                continue
            seen.add(post.id)
            unique.append(post)
        return unique

    async def _place_tutorial(self, ranked: list[Post], now: datetime) -> list[Post]:
        """
        Show the tutorial right after the selection card once per calendar
        day; on later passes the same day, drop it.
        """
        today = today_key(now)
        try:
            shown = await self._store.get(keys.SHOWN_TUTORIAL_DATE)
        except (StoreError, StoreSerializationError) as e:
            logger.warning("Could not read tutorial date", extra={"error": str(e)})
            shown = None

        if shown == today:
            return [p for p in ranked if not is_tutorial(p)]

        idx = next((i for i, p in enumerate(ranked) if is_tutorial(p)), None)
        if idx is None:
            return ranked

        tutorial = ranked.pop(idx)
        ranked.insert(0, tutorial)
        try:
            await self._store.set(keys.SHOWN_TUTORIAL_DATE, today)
        except (StoreError, StoreSerializationError) as e:
            logger.warning("Could not record tutorial date", extra={"error": str(e)})
        return ranked
