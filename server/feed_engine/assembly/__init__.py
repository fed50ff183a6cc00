"""
feed_engine.assembly — Feed assembly and ranking.

Public API:
    FeedAssembler   — builds the ordered post sequence for one pass
    CenteredHistory — "post centered" channel feeding the next pass
    is_valid_post   — content quality rules
    apply_weights   — recency/novelty weighting
    rank_posts      — order weighted posts
"""
from .engine import AssemblyStats, FeedAssembler, SourceContribution, today_key
from .history import CenteredHistory
from .quality import is_valid_post, looks_like_markup_or_code, word_count
from .ranking import apply_weights, parse_post_timestamp, rank_posts, stable_key
from .synthetic import (
    SELECTION_CARD_ID,
    create_fallback_post,
    create_selection_card,
    create_tutorial_post,
)

__all__ = [
    "AssemblyStats",
    "CenteredHistory",
    "FeedAssembler",
    "SELECTION_CARD_ID",
    "SourceContribution",
    "apply_weights",
    "create_fallback_post",
    "create_selection_card",
    "create_tutorial_post",
    "is_valid_post",
    "looks_like_markup_or_code",
    "parse_post_timestamp",
    "rank_posts",
    "stable_key",
    "today_key",
    "word_count",
]
