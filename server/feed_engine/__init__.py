"""
Game Feed Engine

Assembles a personalized, deduplicated, ranked feed of game items from
bundled category catalogs, user-added external JSON endpoints and locally
stored posts, and keeps the registry of those sources in step across app
versions.

Architecture:
    SourceRegistry -> FeedAssembler -> rendering layer
                           ^                 |
                           +-- CenteredHistory <-- "post centered" events

Components:
    - registry: source list, defaults merge, legacy migration, selection
    - fetcher: aiohttp JSON retrieval with explicit per-URL results
    - assembly: fetch orchestration, filtering, ranking, tutorial placement
    - models: Source and Post dataclasses
    - kv_store (sibling package): Redis / in-memory persistence
"""
