"""Extraction of ``#tag`` and ``@mention`` tokens from task descriptions."""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(r"([#@][\w-]+)")


def extract_tokens(text: str) -> tuple[list[str], list[str]]:
    """Return ``(tags, mentions)`` in order of first appearance, without duplicates.

    Tokens keep their sigil: ``"ping @bob about #billing"`` gives
    ``(["#billing"], ["@bob"])``.
    """
    tags: list[str] = []
    mentions: list[str] = []
    for token in _TOKEN_RE.findall(text or ""):
        bucket = mentions if token.startswith("@") else tags
        if token not in bucket:
            bucket.append(token)
    return tags, mentions
