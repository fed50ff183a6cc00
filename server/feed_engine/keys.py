"""
Persisted Key Definitions

Names of every key the feed engine reads or writes in the key-value store.
The registry is the sole writer of the registry keys; the assembler owns
the feed keys.
"""
from __future__ import annotations

# ── Feed keys (assembler) ─────────────────────────────────────────────────────

HAS_VISITED_BEFORE = "hasVisitedBefore"
LOCAL_POSTS = "posts"
POST_CENTERED_HISTORY = "postCenteredHistory"
SHOWN_TUTORIAL_DATE = "shownTutorialDate"

# ── Registry keys ─────────────────────────────────────────────────────────────

ALL_SOURCES = "allNewsSources"
VISIBLE_SOURCES = "visibleSourcesInCard"
EXTERNAL_POST_SOURCES = "externalPostSources"
SELECTED_CATEGORIES = "selectedSourceCategories"
SELECTED_EXTERNAL_URLS = "selectedExternalPostsUrls"
HAS_SELECTED_BEFORE = "hasSelectedSourcesBefore"
CURRENT_SELECTED_SOURCE = "currentSelectedSource"
DEFAULT_SOURCES_CONFIG = "defaultSourcesConfig"
