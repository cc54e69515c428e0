# vacancy_rag/ingestion/text.py
"""Text normalization for embedding input."""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping

_WHITESPACE = re.compile(r"\s+")
_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F-\x9F]")
_ALNUM = re.compile(r"[a-zA-Z0-9]")

DEFAULT_EXCLUDE_KEYS = ("id", "embedding")
FIELD_SEPARATOR = " | "


def clean_text(text: Any) -> str:
    """
    Collapse whitespace runs to single spaces, trim, and drop control characters.

    Non-string input yields an empty string.
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = _WHITESPACE.sub(" ", text).strip()
    return _CONTROL_CHARS.sub("", cleaned)


def format_field(key: str, value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return f"{key}: {'' if value is None else value}"


def row_to_text(row: Mapping[str, Any], exclude_keys: Iterable[str] = DEFAULT_EXCLUDE_KEYS) -> str:
    """
    Render a row as "key: value | key: value".

    Keys are matched against exclude_keys case-insensitively; None values
    are skipped; nested values are rendered as JSON.
    """
    excluded = {k.lower() for k in exclude_keys}
    parts = [
        format_field(key, value)
        for key, value in row.items()
        if key.lower() not in excluded and value is not None
    ]
    return FIELD_SEPARATOR.join(parts)


def is_valid_text(text: Any, min_length: int = 10) -> bool:
    """
    True when the trimmed text has at least min_length characters, and
    at least min_length / 2 of them are ASCII letters or digits.
    """
    if not text or not isinstance(text, str):
        return False

    stripped = text.strip()
    if len(stripped) < min_length:
        return False

    return len(_ALNUM.findall(stripped)) >= min_length / 2


__all__ = [
    "DEFAULT_EXCLUDE_KEYS",
    "FIELD_SEPARATOR",
    "clean_text",
    "format_field",
    "is_valid_text",
    "row_to_text",
]
