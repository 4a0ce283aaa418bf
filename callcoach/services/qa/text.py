"""Utterance normalization shared by every matcher."""

from __future__ import annotations

import re
from typing import Any

from callcoach.core.config import settings

_WHITESPACE = re.compile(r"\s+")
_ANGLE_BRACKETS = re.compile(r"[<>]")


def clean_text(value: Any, max_length: int | None = None, truncate: bool = True) -> str:
    """Trim, collapse whitespace, drop angle brackets and cap the length.

    ``None`` and non-string values become an empty string, so malformed
    input scores as "no evidence" instead of raising.

    Args:
        value: Raw utterance.
        max_length: Length cap; defaults to ``settings.MAX_UTTERANCE_LENGTH``.
        truncate: Apply the length cap. Auto-fail and closing-phrase scans
            pass False so nothing past the cap goes unseen.
    """
    if not isinstance(value, str):
        return ""
    text = _ANGLE_BRACKETS.sub("", value)
    text = _WHITESPACE.sub(" ", text).strip()
    if not truncate:
        return text
    limit = settings.MAX_UTTERANCE_LENGTH if max_length is None else max_length
    return text[:limit]


def normalize_text(value: Any, max_length: int | None = None, truncate: bool = True) -> str:
    """Return the lowercase matching form of an utterance."""
    return clean_text(value, max_length, truncate).lower()


def contains_any(text: str, phrases: tuple[str, ...] | list[str]) -> bool:
    """Check whether ``text`` contains at least one of ``phrases``."""
    return any(phrase in text for phrase in phrases)


__all__ = ["clean_text", "contains_any", "normalize_text"]
