"""
Synthetic Posts

Posts the engine creates itself rather than reading from a source: the
always-first selection card, the one-time tutorial, and the placeholder
shown when nothing else survives filtering.
"""
from __future__ import annotations

from feed_engine.models.post import Post

SELECTION_CARD_ID = "selection-card"
TUTORIAL_ID_PREFIX = "tutorial-"
FALLBACK_ID_PREFIX = "fallback-"

# Lightweight interactive items skip the text quality checks.
DEFAULT_CATEGORY_ITEM_TYPE = "microgame"
INTERACTIVE_TYPES = frozenset({DEFAULT_CATEGORY_ITEM_TYPE})


def is_tutorial(post: Post) -> bool:
    return bool(post.id) and post.id.startswith(TUTORIAL_ID_PREFIX)


def is_synthetic(post: Post) -> bool:
    if not post.id:
        return False
    return (
        post.id == SELECTION_CARD_ID
        or post.id.startswith(TUTORIAL_ID_PREFIX)
        or post.id.startswith(FALLBACK_ID_PREFIX)
    )


def create_selection_card() -> Post:
    return Post(
        id=SELECTION_CARD_ID,
        title="Select Game Sources",
        essence="Welcome! Pick your game categories below:",
        reactions=(),
        source="#",
        extra={"isSelectionCard": True},
    )


def create_tutorial_post() -> Post:
    return Post(
        id=f"{TUTORIAL_ID_PREFIX}1",
        title="Welcome to your games feed!",
        essence=(
            "This is a mobile-first games feed. Each card shows a short description "
            "and a Play button. Tap Play to open the game in a focused popup sized for phones."
        ),
        reactions=(
            "Swipe UP or DOWN to move between games.",
            "Swipe LEFT to view more details about a game.",
            "Tap PLAY on the first slide to start the game in a popup.",
            "Use Manage Sources on the first card to pick categories.",
        ),
        source="#",
        extra={"backgroundColor": "purple"},
    )


def create_fallback_post() -> Post:
    return Post(
        id=f"{FALLBACK_ID_PREFIX}1",
        title="No games available",
        essence=(
            "It seems there are no games available right now. "
            "Please check back later or add sources using Manage Sources."
        ),
        reactions=(),
        source="#",
        extra={"backgroundColor": "night"},
    )
