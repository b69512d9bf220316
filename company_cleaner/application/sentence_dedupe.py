"""
Name: Sentence De-duplication (optional post-processing)

Responsibilities:
  - Drop sentences that repeat an earlier sentence of the same section

Collaborators:
  - application.use_cases.clean_page: applied per section when enabled
  - application.content_hash.normalize_text: sentence identity

Constraints:
  - Exact repeats only (after NFC, whitespace and case folding); near-matches
    are kept because intentional emphasis is indistinguishable from noise
  - Line structure is preserved; a line emptied by removal is dropped
"""

from __future__ import annotations

import re

from .content_hash import normalize_text

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def dedupe_sentences(text: str) -> str:
    """Remove repeated sentences, keeping the first occurrence."""
    seen: set[str] = set()
    kept_lines: list[str] = []

    for line in text.split("\n"):
        kept: list[str] = []
        for sentence in _SENTENCE_END.split(line.strip()):
            if not sentence:
                continue
            identity = normalize_text(sentence).casefold()
            if identity in seen:
                continue
            seen.add(identity)
            kept.append(sentence)
        if kept:
            kept_lines.append(" ".join(kept))

    return "\n".join(kept_lines)
