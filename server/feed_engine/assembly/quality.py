"""
Content Quality Filter

Drops posts whose text is too thin to fill a card or that look like
scraped markup/code. Synthetic posts and interactive items always pass.
"""
from __future__ import annotations

import re

from feed_engine.assembly.synthetic import INTERACTIVE_TYPES, is_synthetic
from feed_engine.models.post import Post

MIN_WORDS_PER_BLOCK = 15

_HTML_TAG = re.compile(r"</?[a-z][^>]*>", re.IGNORECASE)
_CODE = re.compile(
    r"```|<script|function\s|class\s|\{\s*\}|console\.|import\s|export\s|;\s*\n",
    re.IGNORECASE | re.MULTILINE,
)
_HTML_ATTRIBUTE = re.compile(r"\s(?:class|style|id|onclick|onerror|href|src)=", re.IGNORECASE)
_WORD = re.compile(r"\b\w+\b")


def looks_like_markup_or_code(text: str) -> bool:
    if not text:
        return False
    return bool(_HTML_TAG.search(text) or _CODE.search(text) or _HTML_ATTRIBUTE.search(text))


def word_count(text: str) -> int:
    return len(_WORD.findall(text.strip()))


def is_valid_post(post: Post) -> bool:
    """
    Apply the quality rules.

    A regular post needs at least one text block (essence or reaction),
    no block may look like markup/code, and every block needs at least
    MIN_WORDS_PER_BLOCK words.
    """
    if is_synthetic(post):
        return True
    if post.type in INTERACTIVE_TYPES:
        return True

    blocks = post.text_blocks
    if not blocks:
        return False
    if any(looks_like_markup_or_code(block) for block in blocks):
        return False
    return all(word_count(block) >= MIN_WORDS_PER_BLOCK for block in blocks)
