"""SQL redaction utility — strip literal values from statements before logging."""

from __future__ import annotations

import re

_PATTERNS = [
    (re.compile(r"[xX]'[0-9A-Fa-f]*'"), "?"),
    (re.compile(r"'(?:[^']|'')*'"), "?"),
    (re.compile(r"\s+"), " "),
]

_MAX_LENGTH = 120


def redact_sql(sql: str, max_length: int = _MAX_LENGTH) -> str:
    """Replace string and blob literals with ``?`` and collapse whitespace.

    Statements longer than ``max_length`` are cut and marked with ``...``.
    """
    text = sql
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    text = text.strip()
    if len(text) > max_length:
        text = text[: max_length - 3] + "..."
    return text
