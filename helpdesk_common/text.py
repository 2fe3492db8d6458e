"""Text clean-up helpers shared by the suggestion pipeline."""
from __future__ import annotations

import re

_LINE_BREAK_TAG = re.compile(r"<\s*(?:br\s*/?|/p)\s*>", re.IGNORECASE)
_MARKUP_TAG = re.compile(r"</?[A-Za-z][^<>]*>")
_ANGLE_BRACKETS = re.compile(r"[<>]")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_NEWLINE_RUN = re.compile(r" ?\n[\n ]*")
_QUERY_NOISE = re.compile(r"['\"\\<>]")

TERMINAL_PUNCTUATION = (".", "!", "?")
MAX_QUERY_LENGTH = 100


def clean_and_format(text: str | None) -> str:
    """Normalise resolution prose for display.

    HTML tags are removed; a lone ``<`` or ``>`` (as in "latenza < 100 ms")
    is dropped but the surrounding text is kept. Runs of spaces and tabs
    collapse to one space, runs of blank lines collapse to a single newline,
    and non-empty output always ends with terminal punctuation. Applying it
    twice gives the same result.
    """
    if not text:
        return ""
    cleaned = _LINE_BREAK_TAG.sub("\n", text)
    cleaned = _MARKUP_TAG.sub(" ", cleaned)
    cleaned = _ANGLE_BRACKETS.sub("", cleaned)
    cleaned = _HORIZONTAL_SPACE.sub(" ", cleaned)
    cleaned = _NEWLINE_RUN.sub("\n", cleaned)
    cleaned = cleaned.strip()
    if cleaned and not cleaned.endswith(TERMINAL_PUNCTUATION):
        cleaned += "."
    return cleaned


def sanitize_search_query(query: str | None, *, max_length: int = MAX_QUERY_LENGTH) -> str:
    """Strip quotes, backslashes and angle brackets and cap the query length."""
    if not query:
        return ""
    return _QUERY_NOISE.sub("", query).strip()[:max_length]
