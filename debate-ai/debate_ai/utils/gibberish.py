"""Heuristic detection of degenerate (non-linguistic) input.

Used only to pick a better-suited fallback argument; it never rejects input.
"""
from __future__ import annotations

import re
from typing import List


KEYBOARD_ROWS = ("qwertyuiop", "asdfghjkl", "zxcvbnm")
_REPEATED_CHAR = re.compile(r"(.)\1{4,}")
_RUN_LENGTH = 5


def _keyboard_runs() -> List[str]:
    runs: List[str] = []
    for row in KEYBOARD_ROWS:
        for candidate in (row, row[::-1]):
            for i in range(len(candidate) - _RUN_LENGTH + 1):
                runs.append(candidate[i : i + _RUN_LENGTH])
    return runs


_KEYBOARD_RUNS = _keyboard_runs()


def has_keyboard_mash(text: str) -> bool:
    """True if text contains 5 adjacent keys of one keyboard row, e.g. "asdfg" or "poiuy"."""
    lowered = text.lower()
    return any(run in lowered for run in _KEYBOARD_RUNS)


def is_gibberish(text: str) -> bool:
    t = (text or "").strip()
    if len(t) < 10:
        return True
    if _REPEATED_CHAR.search(t):
        return True

    visible = [ch for ch in t if not ch.isspace()]
    letters = [ch for ch in visible if ch.isalpha()]
    if len(letters) / max(1, len(visible)) < 0.6:
        return True

    if has_keyboard_mash(t):
        return True

    # Real sentences carry at least a few words longer than two letters
    long_tokens = [w for w in t.split() if len(w) > 2]
    return len(long_tokens) < 3
