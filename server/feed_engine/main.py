"""
Feed Engine Entry Point

Builds the store, fetcher, source registry and assembler, runs one
assembly pass and logs the resulting feed.

Usage:
    cd server
    python -m feed_engine.main                    # Redis + static asset host
    python -m feed_engine.main --mock             # in-memory store + canned catalogs
    python -m feed_engine.main --mock --json      # print the feed as JSON
    python -m feed_engine.main --add-source https://example.com/posts.json
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging

try:
    from dotenv import load_dotenv
    load_dotenv(".env")
except ImportError:
    pass

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
)
logger = logging.getLogger("feed_engine")


async def run(
    *,
    use_mock: bool = False,
    add_sources: list[str] | None = None,
    select: str | None = None,
    as_json: bool = False,
) -> list[dict]:
    from feed_engine.assembly import FeedAssembler
    from feed_engine.config import settings
    from feed_engine.fetcher import RemoteFetcher
    from feed_engine.mock_catalog import MockCatalogFetcher
    from feed_engine.registry import SourceRegistry
    from kv_store import InMemoryKeyValueStore, RedisKeyValueStore

    redis_store: RedisKeyValueStore | None = None
    remote: RemoteFetcher | None = None

    if use_mock:
        store = InMemoryKeyValueStore()
        fetcher = MockCatalogFetcher()
        logger.info("Running with in-memory store and mock catalogs")
    else:
        redis_store = RedisKeyValueStore(settings.store.url, namespace=settings.store.namespace)
        remote = RemoteFetcher(settings.fetcher.base_url, timeout=settings.fetcher.timeout)
        await redis_store.connect()
        await remote.connect()
        store, fetcher = redis_store, remote

    try:
        registry = SourceRegistry(store, fetcher, settings.assets)
        await registry.initialize()

        for url in add_sources or []:
            added = await registry.add_source({"url": url})
            logger.info(f"add-source {url}: {'added' if added else 'already registered'}")

        if select:
            if not await registry.select_source(select):
                logger.warning(f"Unknown source for --select: {select}")

        assembler = FeedAssembler(store, fetcher, registry, assets=settings.assets)
        feed = [post.to_dict() for post in await assembler.assemble()]

        if as_json:
            print(json.dumps(feed, indent=2, ensure_ascii=False))
        else:
            for idx, post in enumerate(feed):
                tag = f"[{post['tag']}] " if post.get("tag") else ""
                logger.info(f"{idx:>3}. {tag}{post.get('title', '')[:80]}")

        stats = assembler.stats
        logger.info(
            "Final stats",
            extra={
                "posts": len(feed),
                "sources_fetched": stats.sources_fetched,
                "sources_failed": stats.sources_failed,
                "duplicates": stats.posts_duplicate,
                "rejected": stats.posts_rejected,
            },
        )
        return feed
    finally:
        if remote is not None:
            await remote.close()
        if redis_store is not None:
            await redis_store.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Assemble one games feed pass")
    parser.add_argument("--mock", action="store_true", help="In-memory store and canned catalogs")
    parser.add_argument(
        "--add-source",
        action="append",
        default=[],
        metavar="URL",
        help="Register an external JSON source before assembling (repeatable)",
    )
    parser.add_argument("--select", metavar="ID", help="Make one source id/url the sole selection")
    parser.add_argument("--json", action="store_true", help="Print the feed as JSON")
    args = parser.parse_args()

    asyncio.run(
        run(
            use_mock=args.mock,
            add_sources=args.add_source,
            select=args.select,
            as_json=args.json,
        )
    )


if __name__ == "__main__":
    main()
