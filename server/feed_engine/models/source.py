"""
Source Data Model

A configured origin of feed items: a bundled category catalog, a
user-added external JSON endpoint, or a special-purpose entry.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class SourceType(str, Enum):
    """Kind of source."""

    CATEGORY = "category"
    EXTERNAL = "external"
    SPECIAL = "special"

    @classmethod
    def from_string(cls, value: str) -> "SourceType":
        """Convert string to SourceType, defaulting to CATEGORY."""
        for member in cls:
            if member.value == str(value).strip().lower():
                return member
        return cls.CATEGORY


# Keys owned by the dataclass; anything else in a persisted entry is kept in extra.
_KNOWN_KEYS = frozenset({"id", "url", "type", "tag", "removable", "visible", "isContainer"})


@dataclass
class Source:
    """
    One entry of the source registry.

    Mutable: the registry flips `visible` and rewrites legacy ids in place.
    Unknown keys from persisted or shipped entries (display names, icons)
    ride along in `extra` so a load/save cycle never loses them.
    """

    id: Optional[str]
    url: Optional[str]
    type: SourceType = SourceType.CATEGORY
    tag: str = ""
    removable: bool = False
    visible: bool = True
    is_container: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> Optional[str]:
        """Identity used by the visibility record: id, else url."""
        return self.id or self.url

    @property
    def is_external(self) -> bool:
        return self.type is SourceType.EXTERNAL

    @property
    def is_category(self) -> bool:
        return self.type is SourceType.CATEGORY

    def to_dict(self) -> dict[str, Any]:
        d = dict(self.extra)
        d.update(
            {
                "id": self.id,
                "url": self.url,
                "type": self.type.value,
                "tag": self.tag,
                "removable": self.removable,
                "visible": self.visible,
            }
        )
        if self.is_container:
            d["isContainer"] = True
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> Source:
        raw_type = d.get("type")
        return cls(
            id=d.get("id") or None,
            url=d.get("url") or None,
            type=SourceType.from_string(raw_type) if raw_type else SourceType.CATEGORY,
            tag=str(d.get("tag") or ""),
            removable=bool(d.get("removable", False)),
            visible=d.get("visible") is True,
            is_container=bool(d.get("isContainer", False)),
            extra={k: v for k, v in d.items() if k not in _KNOWN_KEYS},
        )
