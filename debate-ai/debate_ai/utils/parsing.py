"""Strict parsing of model output into JSON objects.

Every parse returns a tagged result, `Parsed(data)` or `ParseError(reason)`,
so callers branch on the outcome instead of catching exceptions.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union


@dataclass(frozen=True)
class Parsed:
    data: Dict[str, Any]


@dataclass(frozen=True)
class ParseError:
    reason: str


ParseResult = Union[Parsed, ParseError]


def strip_fences(s: str) -> str:
    s = s.strip()
    s = re.sub(r"^```[a-zA-Z]*\s*\n?|```$", "", s).strip()
    return s


def extract_first_object(s: str) -> Optional[str]:
    """Return the first balanced {...} block, respecting string literals."""
    start = s.find("{")
    if start == -1:
        return None
    depth = 0
    in_str = False
    esc = False
    for i, ch in enumerate(s[start:], start=start):
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return s[start : i + 1]
    return None


def _repair_json(s: str) -> str:
    # Remove trailing commas before } or ]
    return re.sub(r",\s*([}\]])", r"\1", s)


def parse_json_object(text: Any) -> ParseResult:
    if not isinstance(text, str) or not text.strip():
        return ParseError("empty response")

    cleaned = strip_fences(text)
    candidate = extract_first_object(cleaned)
    if candidate is None:
        return ParseError("no JSON object found")

    for attempt in (candidate, _repair_json(candidate)):
        try:
            data = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return Parsed(data)
        return ParseError("top-level JSON value is not an object")
    return ParseError("invalid JSON")


def parse_with(text: Any, validator: Callable[[Dict[str, Any]], ParseResult]) -> ParseResult:
    """Parse `text` and hand the object to `validator` for structural checks."""
    result = parse_json_object(text)
    if isinstance(result, ParseError):
        return result
    return validator(result.data)
