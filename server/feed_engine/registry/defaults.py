"""
Shipped Default Sources

Minimal default set used when the default-sources document cannot be
fetched or parsed, plus the rules that decide which persisted entries
survive an app upgrade.
"""
from __future__ import annotations

import re

from feed_engine.models.source import Source, SourceType

# Category catalogs live at /sources/<id>/games.json; anything else that is
# not an external is left over from an older layout.
CATEGORY_URL_PATTERN = re.compile(r"/sources/[^/]+/games\.json$")

LEGACY_CATEGORY_ID = "allAges"
LEGACY_CATEGORY_TAG = "@allAges"
CURRENT_CATEGORY_ID = "classicArcade"

FALLBACK_CATEGORY_IDS: tuple[str, ...] = (
    "smallChildren",
    "schoolChildren",
    "classicArcade",
    "girls",
    "boys",
    "microStrategy",
    "learnItalian",
    "learnSpanish",
    "learnEnglish",
)
FALLBACK_SPECIAL_IDS: tuple[str, ...] = ("addGame",)


def catalog_url(category_id: str) -> str:
    return f"/sources/{category_id}/games.json"


def _shipped(source_id: str, source_type: SourceType) -> Source:
    return Source(
        id=source_id,
        url=catalog_url(source_id),
        type=source_type,
        tag=source_id,
        removable=False,
        visible=True,
    )


def fallback_default_sources() -> list[Source]:
    """Fresh copy of the hardcoded defaults."""
    sources = [_shipped(sid, SourceType.CATEGORY) for sid in FALLBACK_CATEGORY_IDS]
    sources.extend(_shipped(sid, SourceType.SPECIAL) for sid in FALLBACK_SPECIAL_IDS)
    return sources


def merge_with_defaults(saved: list[Source], defaults: list[Source]) -> list[Source]:
    """
    Reconcile persisted sources with the defaults shipped in this version.

    - removable (user-added) entries are always kept
    - non-removable entries are kept only while their id is still shipped
    - shipped ids missing from the saved list are appended
    """
    default_ids = {s.id for s in defaults if s.id}

    merged: list[Source] = []
    seen_ids: set[str] = set()
    for source in saved:
        if not source.removable and source.id not in default_ids:
            continue
        if source.id and source.id in seen_ids:
            continue
        if source.id:
            seen_ids.add(source.id)
        merged.append(source)

    for default in defaults:
        if default.id and default.id not in seen_ids:
            merged.append(default)
            seen_ids.add(default.id)

    return merged


def is_servable(source: Source) -> bool:
    """Externals always pass; everything else must point at a category catalog."""
    if not source.url:
        return False
    if source.is_external:
        return True
    return CATEGORY_URL_PATTERN.search(source.url) is not None


def migrate_category_id(category_id: str) -> str:
    return CURRENT_CATEGORY_ID if category_id == LEGACY_CATEGORY_ID else category_id


def migrate_legacy_source(source: Source) -> Source:
    """Rewrite the retired 'allAges' category (id or tag form) in place."""
    if source.id == LEGACY_CATEGORY_ID:
        source.id = CURRENT_CATEGORY_ID
        source.url = catalog_url(CURRENT_CATEGORY_ID)
        source.tag = CURRENT_CATEGORY_ID
    elif source.tag.strip() == LEGACY_CATEGORY_TAG:
        source.tag = CURRENT_CATEGORY_ID
    return source
