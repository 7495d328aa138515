"""
Helpers for pulling fields out of arbitrary provider JSON.
"""
from __future__ import annotations

import re
from typing import Any

_TIMESTAMP_LINE = re.compile(r"^\d{2}:\d{2}:\d{2}")


def dig(data: Any, path: str) -> Any:
    """
    Follow a dotted path through dicts and lists ("a.b.0.c").

    Returns None as soon as a step is missing.
    """
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def first_non_empty(data: Any, *paths: str, default: Any = None) -> Any:
    """Try each path in order; the first value that is not None/""/[]/{} wins."""
    for path in paths:
        value = dig(data, path)
        if value not in (None, "", [], {}):
            return value
    return default


def normalize_transcript(text: str | None) -> str | None:
    """
    Turn a WEBVTT subtitle document into plain text.

    Cue header, timing lines and blank lines are dropped and the remaining
    lines are joined with single spaces. Non-WEBVTT text is returned as is.
    """
    if not text or "WEBVTT" not in text:
        return text
    lines = []
    for raw in text.split("\n"):
        line = raw.strip()
        if not line or line.startswith("WEBVTT") or "-->" in line or _TIMESTAMP_LINE.match(line):
            continue
        lines.append(line)
    return " ".join(lines)
