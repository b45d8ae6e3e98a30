"""Banned-word matching: case-insensitive substring search."""

from __future__ import annotations

from typing import Iterable, Optional


def find_banned_word(content: str, banned_words: Iterable[str]) -> Optional[str]:
    """Return the first banned word contained in ``content``, or None."""
    lowered = (content or "").lower()
    for word in banned_words:
        if word and word.lower() in lowered:
            return word
    return None
