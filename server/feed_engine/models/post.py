"""
Post Data Model

One candidate feed entry. Raw JSON items from catalogs, external endpoints
and local storage are normalized into a Post exactly once, at ingestion;
the rest of the pipeline reads typed fields instead of fallback chains.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

# Date-like fields in precedence order.
DATE_FIELDS: tuple[str, ...] = ("publishedAt", "generatedAt", "pubDate", "date", "createdAt")

MAX_DERIVED_ID_LENGTH = 256

_KNOWN_KEYS = frozenset(
    {"id", "title", "essence", "reactions", "source", "url", "tag", "type", *DATE_FIELDS}
)


def _label(value: Any) -> Optional[str]:
    """Non-empty string labels only; arrays, objects and numbers are dropped."""
    return value if isinstance(value, str) and value else None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class Post:
    """
    Normalized feed item.

    `weight` and `timestamp` are attached during a single assembly pass and
    are never persisted (to_dict() leaves them out).
    """

    id: Optional[str]
    title: str = ""
    essence: str = ""
    reactions: tuple[str, ...] = ()
    source: str = ""
    url: str = ""
    date: str = ""
    date_field: Optional[str] = None
    tag: Optional[str] = None
    type: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    # Ephemeral ranking fields
    weight: Optional[int] = field(default=None, compare=False)
    timestamp: int = field(default=0, compare=False)

    @property
    def origin(self) -> str:
        """Provenance marker: source, else url."""
        return self.source or self.url

    @property
    def text_blocks(self) -> list[str]:
        """Essence followed by every non-empty reaction."""
        blocks = [self.essence] if self.essence else []
        blocks.extend(r for r in self.reactions if r)
        return blocks

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the camelCase shape stored locally and rendered."""
        d = dict(self.extra)
        d.update(
            {
                "id": self.id,
                "title": self.title,
                "essence": self.essence,
                "reactions": list(self.reactions),
                "source": self.source,
            }
        )
        if self.url:
            d["url"] = self.url
        if self.date_field:
            d[self.date_field] = self.date
        if self.tag:
            d["tag"] = self.tag
        if self.type:
            d["type"] = self.type
        return d


def normalize_post(
    raw: Any,
    *,
    tag: Optional[str] = None,
    default_type: Optional[str] = None,
) -> Optional[Post]:
    """
    Convert a raw JSON item into a Post.

    Args:
        raw: Item as decoded from a catalog, endpoint or local storage.
        tag: Tag inherited from the originating source when the item has none.
        default_type: Type applied when the item has none.

    Returns:
        The normalized Post, or None if raw is not a JSON object.
    """
    if not isinstance(raw, Mapping):
        return None

    date_field = next((name for name in DATE_FIELDS if raw.get(name)), None)

    reactions = raw.get("reactions")
    if not isinstance(reactions, (list, tuple)):
        reactions = ()

    raw_id = raw.get("id")

    return Post(
        id=_text(raw_id) if raw_id not in (None, "") else None,
        title=_text(raw.get("title")),
        essence=_text(raw.get("essence")),
        reactions=tuple(r for r in reactions if isinstance(r, str) and r),
        source=_text(raw.get("source")),
        url=_text(raw.get("url")),
        date=_text(raw.get(date_field)) if date_field else "",
        date_field=date_field,
        tag=_label(raw.get("tag")) or tag,
        type=_label(raw.get("type")) or default_type,
        extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
    )


def derive_post_id(post: Post) -> Optional[str]:
    """
    Deterministic id for a post that arrived without one.

    Built from provenance, title and date, truncated to 256 characters.
    Returns None when none of those is available.
    """
    if not (post.origin or post.title or post.date):
        return None
    return f"{post.origin}|{post.title}|{post.date}"[:MAX_DERIVED_ID_LENGTH]
