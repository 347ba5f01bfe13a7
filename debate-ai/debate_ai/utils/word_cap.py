"""Word counting, word-cap validation, and sentence-aware truncation."""
from __future__ import annotations

import re
from typing import NamedTuple

from debate_ai.config import settings
from debate_ai.models.schemas import OperationResult


_SENTENCE_END = re.compile(r"[.!?]")


class WordCapResult(NamedTuple):
    truncated: str
    violations: int


def word_count(text: str) -> int:
    """Count whitespace-delimited, non-empty tokens."""
    if not isinstance(text, str):
        return 0
    return len([w for w in text.split() if w.strip()])


def validate_word_count(text: str, limit: int) -> OperationResult:
    count = word_count(text)
    if count > limit:
        return OperationResult.failure(
            f"Response exceeds word cap of {limit} words. Current: {count} words.",
            error="validation",
        )
    return OperationResult.ok("Response is within the word limit.")


def truncate_to_word_limit(text: str, limit: int) -> str:
    """Trim text to at most `limit` words, preferring to end on a full sentence.

    The cut lands just after the last sentence terminator when that terminator
    sits inside the final 20% of the truncated window; otherwise the window is
    hard-cut and an ellipsis is glued onto its last word.
    """
    words = text.split()
    if len(words) <= limit:
        return text
    if limit <= 0:
        return ""

    truncated = " ".join(words[:limit])
    boundary = -1
    for m in _SENTENCE_END.finditer(truncated):
        boundary = m.start()
    if boundary > len(truncated) * settings.TRUNCATION_BOUNDARY_RATIO:
        return truncated[: boundary + 1]
    return truncated + "..."


def enforce_word_cap(text: str, limit: int) -> WordCapResult:
    count = word_count(text)
    if count <= limit:
        return WordCapResult(truncated=text, violations=0)
    return WordCapResult(truncated=truncate_to_word_limit(text, limit), violations=count - limit)
