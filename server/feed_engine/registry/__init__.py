"""
feed_engine.registry — Source configuration and selection.

Public API:
    SourceRegistry   — stateful registry service
    SelectedSources  — resolved selection for one assembly pass
    derive_tag       — short label from a source URL
    normalize_tag    — sanitize a user-supplied tag
"""
from .sources import SelectedSources, SourceRegistry, generate_source_id
from .tags import derive_tag, normalize_tag

__all__ = [
    "SelectedSources",
    "SourceRegistry",
    "derive_tag",
    "generate_source_id",
    "normalize_tag",
]
