"""
Name: Line Normalizer

Responsibilities:
  - Strip template cruft from extracted lines before classification
  - Signal "drop this line" with an empty string

Collaborators:
  - application.block_text_extractor: produces raw lines
  - application.section_classifier: consumes non-empty results
  - domain.taxonomy.Taxonomy.noise_patterns: whole-line drops

Constraints:
  - Rules run in a fixed order
  - Idempotent: rules are re-applied until the line stops changing

Notes:
  - Rule order: banner drop, "Step N" tokens, word-count annotations,
    non-breaking spaces, whitespace, "Section N:" prefix, noise drop
"""

from __future__ import annotations

import re
from typing import Iterable, List, Sequence

# R: ===== TEXT =====, ---- TEXT ----, *** TEXT *** (optionally after a heading marker)
_BANNER = re.compile(r"^\s*(?:#{1,3}\s+)?([=\-*~_#])\1{2,}.*?\1{3,}\s*$")
_STEP_TOKEN = re.compile(r"\bstep\s*\d+\b\s*[:.\-]?", re.IGNORECASE)
_WORD_COUNT = re.compile(
    r"\(\s*\d+\s*(?:[-–]\s*\d+\s*)?words?\s*\)", re.IGNORECASE
)
_NBSP = re.compile(r"[\u00a0\u202f\u2007]")
_INNER_SPACES = re.compile(r"[ \t]{2,}")
_SECTION_PREFIX = re.compile(r"^(?:#{1,3}\s*)?section\s+\d+\s*:\s*", re.IGNORECASE)


def _apply_rules(line: str, noise_patterns: Sequence[re.Pattern]) -> str:
    if _BANNER.match(line):
        return ""
    line = _STEP_TOKEN.sub("", line)
    line = _WORD_COUNT.sub("", line)
    line = _NBSP.sub(" ", line)
    line = _INNER_SPACES.sub(" ", line)
    line = line.strip()
    line = _SECTION_PREFIX.sub("", line).strip()
    if any(pattern.search(line) for pattern in noise_patterns):
        return ""
    return line


def normalize_line(raw: str, noise_patterns: Sequence[re.Pattern] = ()) -> str:
    """
    R: Clean one raw line.

    Returns:
        Cleaned line, or "" when nothing meaningful remains
    """
    line = raw or ""
    while True:
        cleaned = _apply_rules(line, noise_patterns)
        if cleaned == line:
            return cleaned
        line = cleaned


def normalize_lines(
    lines: Iterable[str], noise_patterns: Sequence[re.Pattern] = ()
) -> List[str]:
    """R: Normalize many lines, skipping the ones that become empty."""
    normalized: List[str] = []
    for raw in lines:
        line = normalize_line(raw, noise_patterns)
        if line:
            normalized.append(line)
    return normalized
