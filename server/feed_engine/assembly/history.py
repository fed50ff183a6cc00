"""
Centered-History Map

Records which posts the user has seen at the focal position of the
viewport. The rendering layer reports "post centered" events here; the
next assembly pass sinks those posts to the end. The map only grows.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Union

from kv_store import KeyValueStore

from feed_engine import keys
from feed_engine.assembly.ranking import stable_key
from feed_engine.models.post import Post, derive_post_id, normalize_post

logger = logging.getLogger(__name__)


class CenteredHistory:
    """Persisted mapping: stable post key -> {"centered": True}."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def load(self) -> dict[str, Any]:
        history = await self._store.get(keys.POST_CENTERED_HISTORY)
        return dict(history) if isinstance(history, Mapping) else {}

    async def mark_centered(self, post: Union[Post, Mapping[str, Any]]) -> str | None:
        """
        Record that a post reached the center of the viewport.

        Accepts the Post from the assembled feed or its rendered dict.

        Returns:
            The history key written, or None if the payload is not a post.
        """
        if not isinstance(post, Post):
            post = normalize_post(post)
            if post is None:
                return None
        if not post.id:
            post.id = derive_post_id(post)

        key = stable_key(post)
        if not key or key.strip("|") == "":
            return None

        history = await self.load()
        entry = history.get(key)
        if isinstance(entry, Mapping) and entry.get("centered") is True:
            return key

        history[key] = {"centered": True}
        await self._store.set(keys.POST_CENTERED_HISTORY, history)
        logger.debug("Post centered", extra={"post_id": post.id, "history_key": key})
        return key
