"""
Source Registry

Owns the list of configured sources (shipped categories plus user-added
externals), reconciles persisted state with the defaults of the running
version, and resolves which sources feed the next assembly pass.

The registry is the sole writer of the registry keys in the store. It
does no locking: callers must serialize mutation calls, since the store is
last-write-wins.
"""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from kv_store import KeyValueStore, StoreError, StoreSerializationError

from feed_engine import keys
from feed_engine.config import AssetsConfig
from feed_engine.fetcher import Fetcher
from feed_engine.models.source import Source, SourceType
from feed_engine.registry.defaults import (
    fallback_default_sources,
    is_servable,
    merge_with_defaults,
    migrate_category_id,
    migrate_legacy_source,
)
from feed_engine.registry.tags import derive_tag, normalize_tag

logger = logging.getLogger(__name__)

SourceLike = Union[Source, Mapping[str, Any]]


def generate_source_id() -> str:
    """Fresh id for a user-added source."""
    return f"external-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class SelectedSources:
    """Sources feeding one assembly pass. Containers are already expanded."""

    categories: tuple[str, ...] = ()
    external: tuple[str, ...] = ()

    @property
    def all(self) -> tuple[str, ...]:
        return (*self.categories, *self.external)


class SourceRegistry:
    """
    Stateful source registry service.

    Construct one per session and hand it to the FeedAssembler; nothing
    here is module-global.
    """

    def __init__(
        self,
        store: KeyValueStore,
        fetcher: Fetcher,
        assets: Optional[AssetsConfig] = None,
    ) -> None:
        self._store = store
        self._fetcher = fetcher
        self._assets = assets or AssetsConfig()
        self._sources: list[Source] = []
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ── Initialization ────────────────────────────────────────────────────────

    async def initialize(self) -> list[Source]:
        """
        Load and reconcile the source list. No-op once initialized.

        Steps: merge persisted sources with shipped defaults, apply the
        persisted visibility record, drop non-catalog entries, migrate
        legacy ids, sync externals, persist.
        """
        if self._initialized:
            return list(self._sources)

        saved = await self._store.get(keys.ALL_SOURCES)
        defaults = await self._load_defaults()

        if isinstance(saved, list) and saved:
            saved_sources = [Source.from_dict(s) for s in saved if isinstance(s, Mapping)]
            self._sources = merge_with_defaults(saved_sources, defaults)
        else:
            self._sources = list(defaults)

        visible_keys = await self._store.get(keys.VISIBLE_SOURCES)
        if isinstance(visible_keys, list):
            allowed = {k for k in visible_keys if isinstance(k, str)}
            for source in self._sources:
                source.visible = source.key in allowed
        else:
            # First run: today's visibility becomes the baseline
            await self._save_visibility()

        self._sources = [s for s in self._sources if is_servable(s)]
        self._sources = self._unique_ids(migrate_legacy_source(s) for s in self._sources)

        await self.sync_external_sources()
        await self._save_sources()

        self._initialized = True
        logger.info(
            "SourceRegistry initialized",
            extra={
                "sources": len(self._sources),
                "visible": sum(1 for s in self._sources if s.visible),
                "externals": sum(1 for s in self._sources if s.is_external),
            },
        )
        return list(self._sources)

    async def _load_defaults(self) -> list[Source]:
        """Shipped defaults, or the hardcoded minimal set if unavailable."""
        result = await self._fetcher.fetch_json(self._assets.defaults_path)
        data = result.data if result.ok else None

        if isinstance(data, Mapping) and isinstance(data.get("sources"), list):
            await self._store.set(keys.DEFAULT_SOURCES_CONFIG, data)
            return [Source.from_dict(s) for s in data["sources"] if isinstance(s, Mapping)]

        logger.warning(
            "Default sources config unavailable, using minimal fallback",
            extra={
                "path": self._assets.defaults_path,
                "error": str(result.error) if result.error else "malformed document",
            },
        )
        return fallback_default_sources()

    async def reload(self) -> list[Source]:
        """Drop in-memory state and re-run initialize()."""
        self._initialized = False
        self._sources = []
        return await self.initialize()

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    @staticmethod
    def _unique_ids(sources: Iterable[Source]) -> list[Source]:
        result: list[Source] = []
        seen: set[str] = set()
        for source in sources:
            if source.id:
                if source.id in seen:
                    continue
                seen.add(source.id)
            result.append(source)
        return result

    # ── Externals ─────────────────────────────────────────────────────────────

    async def sync_external_sources(self) -> bool:
        """
        Reconcile registry externals with the legacy externalPostSources list.

        Returns True if the registry changed.
        """
        legacy = await self._store.get(keys.EXTERNAL_POST_SOURCES)
        entries = [e for e in legacy if isinstance(e, Mapping)] if isinstance(legacy, list) else []

        allowed_urls = {e["url"] for e in entries if e.get("url")}
        existing_urls = {s.url for s in self._sources if s.url}

        changed = False
        for entry in entries:
            url = entry.get("url")
            if not url or url in existing_urls:
                continue
            self._sources.append(
                Source(
                    id=generate_source_id(),
                    url=url,
                    type=SourceType.EXTERNAL,
                    tag=normalize_tag(entry.get("tag")) or derive_tag(url),
                    removable=True,
                    visible=True,
                )
            )
            existing_urls.add(url)
            changed = True

        before = len(self._sources)
        self._sources = [
            s for s in self._sources if not s.is_external or (s.url and s.url in allowed_urls)
        ]
        if len(self._sources) != before:
            changed = True

        if changed:
            try:
                await self._save_sources()
                await self._save_visibility()
            except (StoreError, StoreSerializationError) as e:
                logger.warning(
                    "Failed to persist synced externals",
                    extra={"error": str(e)},
                )
        return changed

    # ── Queries ───────────────────────────────────────────────────────────────

    async def get_all_sources(self) -> list[Source]:
        if not self._initialized:
            await self.initialize()
        else:
            # Externals may have been edited elsewhere since the last call
            await self.sync_external_sources()
            try:
                await self._save_sources()
            except (StoreError, StoreSerializationError) as e:
                logger.warning("Failed to persist sources", extra={"error": str(e)})
        return list(self._sources)

    async def get_visible_sources(self) -> list[Source]:
        await self._ensure_initialized()
        return [s for s in self._sources if s.visible is True]

    def _visible_category_ids(self) -> list[str]:
        return [s.id for s in self._sources if s.is_category and s.visible is True and s.id]

    def _find(self, source_id: str) -> Optional[Source]:
        return next((s for s in self._sources if s.id == source_id or s.url == source_id), None)

    async def get_selected_sources(self) -> SelectedSources:
        """
        Resolve the sources for the next assembly pass.

        A single-selection record wins outright. Otherwise the legacy
        multi-select lists are used, seeded on first use with the visible
        categories and no externals.
        """
        await self._ensure_initialized()

        current = await self._store.get(keys.CURRENT_SELECTED_SOURCE)
        if isinstance(current, Mapping):
            if current.get("type") == SourceType.EXTERNAL.value and current.get("url"):
                return SelectedSources(external=(current["url"],))
            if current.get("id"):
                categories = await self._expand_containers([migrate_category_id(current["id"])])
                return SelectedSources(categories=tuple(categories))

        has_selected_before = await self._store.get(keys.HAS_SELECTED_BEFORE)
        categories = await self._store.get(keys.SELECTED_CATEGORIES)
        external = await self._store.get(keys.SELECTED_EXTERNAL_URLS)

        if not has_selected_before and categories is None and external is None:
            categories = self._visible_category_ids()
            external = []
            await self._store.set(keys.SELECTED_CATEGORIES, categories)
            await self._store.set(keys.SELECTED_EXTERNAL_URLS, external)
            await self._store.set(keys.HAS_SELECTED_BEFORE, True)
            logger.info(
                "Seeded initial source selection",
                extra={"categories": len(categories)},
            )

        if not isinstance(categories, list):
            categories = self._visible_category_ids()
        if not isinstance(external, list):
            external = []

        migrated = [migrate_category_id(c) for c in categories if isinstance(c, str) and c]
        expanded = await self._expand_containers(migrated)
        return SelectedSources(
            categories=tuple(expanded),
            external=tuple(u for u in external if isinstance(u, str) and u),
        )

    async def _expand_containers(self, category_ids: list[str]) -> list[str]:
        """Replace container ids with their children's ids, one level deep."""
        expanded: list[str] = []
        for category_id in category_ids:
            source = next((s for s in self._sources if s.id == category_id), None)
            if source is None or not source.is_container or not source.url:
                expanded.append(category_id)
                continue

            result = await self._fetcher.fetch_json(source.url)
            if not result.ok:
                logger.warning(
                    "Container source unavailable",
                    extra={"source_id": category_id, "error": str(result.error)},
                )
            children = [
                child["id"]
                for child in result.items()
                if isinstance(child, Mapping) and isinstance(child.get("id"), str) and child["id"]
            ]
            expanded.extend(children)
        return expanded

    # ── Mutations ─────────────────────────────────────────────────────────────

    async def update_visibility(self, source_id: str, visible: bool) -> bool:
        """Show or hide a source (matched by id or url) in the selector."""
        await self._ensure_initialized()
        source = self._find(source_id)
        if source is None:
            return False
        source.visible = bool(visible)
        await self._save_visibility()
        await self._save_sources()
        return True

    async def update_all_sources(self, sources: Iterable[SourceLike]) -> None:
        """Replace the whole list (used by the manage-sources screen)."""
        self._sources = [s if isinstance(s, Source) else Source.from_dict(s) for s in sources]
        self._initialized = True
        await self._save_sources()
        await self._save_visibility()
        await self._sync_external_to_legacy()

    async def add_source(self, source: SourceLike) -> bool:
        """
        Register a new source.

        Missing fields are filled in: generated id, type external, removable,
        visible, and a tag derived from the url. For a Source argument, a
        field still at its dataclass default (type category, not removable,
        empty tag) counts as missing.

        Returns:
            False (and changes nothing) if the url or id is already registered.
        """
        await self._ensure_initialized()
        raw = self._draft(source) if isinstance(source, Source) else dict(source)

        url = raw.get("url") or None
        if url and any(s.url == url for s in self._sources):
            logger.info("Source already registered", extra={"url": url})
            return False
        if raw.get("id") and any(s.id == raw["id"] for s in self._sources):
            logger.info("Source id already registered", extra={"source_id": raw["id"]})
            return False

        new_source = Source.from_dict(raw)
        new_source.id = new_source.id or generate_source_id()
        new_source.type = (
            SourceType.from_string(raw["type"]) if raw.get("type") else SourceType.EXTERNAL
        )
        new_source.removable = raw.get("removable") is not False
        new_source.visible = raw.get("visible") is not False
        new_source.tag = normalize_tag(raw.get("tag")) or derive_tag(url)

        self._sources.append(new_source)
        await self._save_sources()
        await self._save_visibility()
        await self._sync_external_to_legacy()
        logger.info(
            "Source added",
            extra={"source_id": new_source.id, "url": url, "tag": new_source.tag},
        )
        return True

    @staticmethod
    def _draft(source: Source) -> dict[str, Any]:
        """Mapping view of a Source with default-valued fields left out."""
        raw = source.to_dict()
        if source.type is SourceType.CATEGORY:
            del raw["type"]
        if not source.removable:
            del raw["removable"]
        if not source.tag:
            del raw["tag"]
        return raw

    async def remove_source(self, source_id: str) -> bool:
        """
        Remove a user-added source (matched by id or url).

        Returns:
            False if no such source exists or it is a shipped default.
        """
        await self._ensure_initialized()
        source = self._find(source_id)
        if source is None or not source.removable:
            return False

        self._sources.remove(source)
        await self._save_sources()
        await self._save_visibility()
        await self._sync_external_to_legacy()
        logger.info("Source removed", extra={"source_id": source.id})
        return True

    # ── Selection ─────────────────────────────────────────────────────────────

    async def save_selected_sources(self, categories: list[str], external: list[str]) -> None:
        """Persist a multi-select choice and mark that the user has chosen."""
        await self._store.set(keys.SELECTED_CATEGORIES, list(categories))
        await self._store.set(keys.SELECTED_EXTERNAL_URLS, list(external))
        await self._store.set(keys.HAS_SELECTED_BEFORE, True)

    async def select_source(self, source_id: str) -> bool:
        """Make one source (id or url) the sole selection for future passes."""
        await self._ensure_initialized()
        source = self._find(source_id)
        if source is None:
            return False
        await self._store.set(
            keys.CURRENT_SELECTED_SOURCE,
            {"id": source.id, "type": source.type.value, "url": source.url},
        )
        return True

    async def clear_selection(self) -> None:
        """Drop the single-selection record; the multi-select lists apply again."""
        await self._store.set(keys.CURRENT_SELECTED_SOURCE, None)

    # ── Persistence ───────────────────────────────────────────────────────────

    async def _save_sources(self) -> None:
        await self._store.set(keys.ALL_SOURCES, [s.to_dict() for s in self._sources])

    async def _save_visibility(self) -> None:
        visible = [s.key for s in self._sources if s.visible is True and s.key]
        await self._store.set(keys.VISIBLE_SOURCES, visible)

    async def _sync_external_to_legacy(self) -> None:
        externals = [{"url": s.url, "tag": s.tag} for s in self._sources if s.is_external]
        await self._store.set(keys.EXTERNAL_POST_SOURCES, externals)

    @staticmethod
    def derive_tag(url: Optional[str]) -> str:
        return derive_tag(url)
