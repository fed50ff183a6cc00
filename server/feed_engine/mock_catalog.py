"""
Mock catalogs for running without a static asset host.

Serves a default-sources document, one games.json per category and a
generic list of posts for any absolute (external) URL, through the same
Fetcher protocol as RemoteFetcher.

Usage:
    python -m feed_engine.main --mock
"""
from __future__ import annotations

import random
import re
import uuid
from datetime import datetime, timedelta, timezone

from feed_engine.core.types import FetchError
from feed_engine.fetcher.interface import FetchResult
from feed_engine.registry.defaults import FALLBACK_CATEGORY_IDS, catalog_url

GAMES: dict[str, list[tuple[str, str]]] = {
    # category -> [(title, essence)]
    "smallChildren": [
        ("Bubble Pop", "Pop the floating bubbles before they reach the top."),
        ("Animal Sounds", "Tap an animal to hear the sound it makes."),
    ],
    "schoolChildren": [
        ("Times Table Dash", "Race the clock through multiplication questions."),
        ("Capital Quiz", "Match each country with its capital city."),
    ],
    "classicArcade": [
        ("Brick Breaker", "Bounce the ball and clear every brick on the board."),
        ("Snake", "Eat, grow, and never bite your own tail."),
        ("Asteroid Drift", "Steer clear of tumbling rocks in open space."),
    ],
    "girls": [("Fashion Match", "Pair outfits and accessories for the runway.")],
    "boys": [("Kart Sprint", "Tight corners, short tracks, fast laps.")],
    "microStrategy": [("Tiny Towers", "Place three towers to hold the path.")],
    "learnItalian": [("Parole Veloci", "Tap the Italian word that matches the picture.")],
    "learnSpanish": [("Palabras Rápidas", "Tap the Spanish word that matches the picture.")],
    "learnEnglish": [("Word Builder", "Drag letters to spell the word you hear.")],
}

CONTAINERS: dict[str, tuple[str, ...]] = {
    "learnLanguages": ("learnItalian", "learnSpanish", "learnEnglish"),
}

EXTERNAL_ESSAYS: list[tuple[str, str]] = [
    (
        "Why short games keep players coming back",
        "Short sessions fit into the gaps of a busy day, and a quick win gives players "
        "a reason to return tomorrow for one more round with friends.",
    ),
    (
        "Designing touch controls that feel right",
        "Good touch controls respond instantly, forgive small mistakes, and keep the "
        "important buttons within easy reach of a thumb on a small screen.",
    ),
]

_CATALOG_PATH = re.compile(r"/sources/([^/]+)/games\.json$")


def default_sources_document() -> dict:
    sources = [
        {
            "id": cid,
            "type": "category",
            "url": catalog_url(cid),
            "tag": cid,
            "removable": False,
            "visible": True,
        }
        for cid in FALLBACK_CATEGORY_IDS
    ]
    for cid in CONTAINERS:
        sources.append(
            {
                "id": cid,
                "type": "category",
                "url": catalog_url(cid),
                "tag": cid,
                "removable": False,
                "visible": False,
                "isContainer": True,
            }
        )
    return {"version": 1, "sources": sources}


def _age(max_hours: int) -> str:
    dt = datetime.now(timezone.utc) - timedelta(hours=random.randint(1, max_hours))
    return dt.isoformat()


def _game(category: str, title: str, essence: str) -> dict:
    return {
        "id": f"{category}-{uuid.uuid4().hex[:8]}",
        "title": title,
        "essence": essence,
        "reactions": [],
        "source": f"/sources/{category}/",
        "publishedAt": _age(720),
    }


class MockCatalogFetcher:
    """In-process Fetcher serving canned documents."""

    def __init__(self, *, unreachable: tuple[str, ...] = ()) -> None:
        self._unreachable = set(unreachable)
        self.requested: list[str] = []

    async def fetch_json(self, url: str) -> FetchResult:
        self.requested.append(url)
        if url in self._unreachable:
            return FetchResult.failure(FetchError("Mock source unreachable", url=url, status=503))

        if url.endswith("/default_sources.json"):
            return FetchResult.success(url, default_sources_document())

        match = _CATALOG_PATH.search(url)
        if match:
            category = match.group(1)
            if category in CONTAINERS:
                return FetchResult.success(url, [{"id": c} for c in CONTAINERS[category]])
            if category in GAMES:
                return FetchResult.success(
                    url, [_game(category, title, essence) for title, essence in GAMES[category]]
                )
            return FetchResult.failure(FetchError("Not found", url=url, status=404))

        if url.startswith(("http://", "https://")):
            return FetchResult.success(
                url,
                [
                    {"title": title, "essence": essence, "source": url, "publishedAt": _age(96)}
                    for title, essence in EXTERNAL_ESSAYS
                ],
            )

        return FetchResult.failure(FetchError("Not found", url=url, status=404))
