"""
Feed Engine Data Models
"""
from feed_engine.models.post import (
    DATE_FIELDS,
    Post,
    derive_post_id,
    normalize_post,
)
from feed_engine.models.source import Source, SourceType

__all__ = [
    "DATE_FIELDS",
    "Post",
    "Source",
    "SourceType",
    "derive_post_id",
    "normalize_post",
]
