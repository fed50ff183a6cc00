"""
Source Tag Derivation

Short labels used to annotate posts with their origin. A tag is derived
from the source URL when the user did not supply one.
"""
from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlsplit

FALLBACK_TAG = "external"
MAX_TAG_LENGTH = 24

_DISALLOWED = re.compile(r"[^a-zA-Z0-9_-]+")


def normalize_tag(value: Any) -> str:
    """Trim, drop a leading '#', keep [A-Za-z0-9_-] only, cap at 24 chars."""
    if not value:
        return ""
    text = str(value).strip()
    if text.startswith("#"):
        text = text[1:]
    return _DISALLOWED.sub("", text)[:MAX_TAG_LENGTH]


def _segment_after_sources(path: str) -> Optional[str]:
    parts = [p for p in path.split("/") if p]
    try:
        idx = parts.index("sources")
    except ValueError:
        return None
    return parts[idx + 1] if idx + 1 < len(parts) else None


def derive_tag(url: Optional[str]) -> str:
    """
    Extract a short label from a source URL.

    "/sources/boys/games.json"           -> "boys"
    "https://cdn.x.io/sources/kids/a"    -> "kids"
    "https://www.example.com/feed.json"  -> "example"

    Returns "external" when nothing usable can be derived.
    """
    if not url:
        return FALLBACK_TAG

    try:
        if url.startswith("/"):
            segment = _segment_after_sources(url)
            tag = normalize_tag(segment) if segment else ""
            return tag or FALLBACK_TAG

        parts = urlsplit(url)
        host = parts.hostname
        if not parts.scheme or not host:
            return FALLBACK_TAG

        segment = _segment_after_sources(parts.path)
        if segment:
            tag = normalize_tag(segment)
        else:
            if host.startswith("www."):
                host = host[4:]
            tag = normalize_tag(host.split(".")[0])
        return tag or FALLBACK_TAG
    except ValueError:
        return FALLBACK_TAG
