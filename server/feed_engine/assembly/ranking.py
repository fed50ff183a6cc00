"""
Recency / Novelty Ranking

weight = age in hours, clamped to [1, 1000]; undated posts get 1000.
Posts the user has already seen centered get 2000 and sink to the end.
Lower weight sorts first; equal weights prefer the newer post.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, Mapping

from feed_engine.models.post import Post

logger = logging.getLogger(__name__)

MIN_WEIGHT = 1
MAX_AGE_WEIGHT = 1000
CENTERED_WEIGHT = 2000

_MS_PER_HOUR = 60 * 60 * 1000


def parse_post_timestamp(value: str) -> int:
    """
    Parse a post date into epoch milliseconds.

    Accepts ISO 8601 ("2025-07-24T17:06:15Z"), RFC 2822 ("Thu, 24 Jul 2025
    17:06:15 GMT", as found in RSS pubDate) and bare epoch milliseconds.
    Naive datetimes are taken as UTC.

    Returns:
        Milliseconds since the epoch, or 0 if the value cannot be parsed.
    """
    text = (value or "").strip()
    if not text:
        return 0

    if text.isascii() and text.isdigit():
        return int(text)

    dt: datetime | None = None
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        dt = datetime.fromisoformat(iso)
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            dt = None

    if dt is None:
        logger.debug("Unparseable post date", extra={"date": text[:64]})
        return 0

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def stable_key(post: Post) -> str:
    """
    History key for a post: "<origin>|<date>" when it has an origin.

    Survives id changes in upstream catalogs, as long as the item keeps
    its origin and date.
    """
    origin = post.origin.strip().lower()
    date = post.date.strip()
    if origin:
        return f"{origin}|{date}"
    return post.id or f"{post.title.strip()}|{date}"


def is_centered(post: Post, history: Mapping[str, Any]) -> bool:
    for key in (stable_key(post), post.id):
        entry = history.get(key) if key else None
        if isinstance(entry, Mapping) and entry.get("centered"):
            return True
    return False


def apply_weights(posts: Iterable[Post], history: Mapping[str, Any], now: datetime) -> None:
    """Attach weight and timestamp to every post, in place."""
    now_ms = int(now.timestamp() * 1000)
    for post in posts:
        ts = parse_post_timestamp(post.date)
        age_hours = (now_ms - ts) // _MS_PER_HOUR if ts else MAX_AGE_WEIGHT
        base_weight = max(MIN_WEIGHT, min(MAX_AGE_WEIGHT, age_hours))
        post.weight = CENTERED_WEIGHT if is_centered(post, history) else base_weight
        post.timestamp = ts


def rank_posts(posts: Iterable[Post]) -> list[Post]:
    """Ascending weight, newest first on ties. Posts must already be weighted."""
    return sorted(posts, key=lambda p: (p.weight, -p.timestamp))
