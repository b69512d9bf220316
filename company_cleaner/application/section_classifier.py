"""
Name: Section Classifier

Responsibilities:
  - Route normalized lines into SectionKey buckets in a single pass
  - Treat rule-matching lines as section headers (consumed, not content)
  - Send preamble lines (before any header) to the taxonomy fallback key

Collaborators:
  - domain.taxonomy.Taxonomy: ordered rules and fallback key
  - domain.entities.SectionBucket: accumulated output

Constraints:
  - Greedy, no look-ahead, never reclassifies earlier lines
  - First matching rule wins (declared order is the tie-break)
  - No line is dropped: every non-header line lands in exactly one bucket

Notes:
  - The fallback is silent for callers; it is only visible in DEBUG logs
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..domain.entities import SectionBucket, SectionKey
from ..domain.taxonomy import Taxonomy
from ..logger import logger


class SectionClassifier:
    """
    R: Stateful single-pass classifier.

    One instance per run; the cursor and buckets are not shared.
    """

    def __init__(self, taxonomy: Taxonomy):
        self.taxonomy = taxonomy
        self.buckets = SectionBucket()
        self.current_key: Optional[SectionKey] = None
        self.headers_seen = 0

    def match(self, line: str) -> Optional[SectionKey]:
        """R: Key of the first rule matching line, if any."""
        for rule in self.taxonomy.rules:
            if rule.matches(line):
                return rule.key
        return None

    def feed(self, line: str) -> None:
        key = self.match(line)
        if key is not None:
            self.current_key = key
            self.headers_seen += 1
            self.buckets.open(key)
            return

        if self.current_key is None:
            self.current_key = self.taxonomy.fallback
            logger.debug(
                "Line routed to fallback section",
                extra={"section": str(self.current_key)},
            )
        self.buckets.append(self.current_key, line)

    def classify(self, lines: Iterable[str]) -> SectionBucket:
        """
        R: Classify every line in order and return the buckets.

        Args:
            lines: Normalized, non-empty lines

        Returns:
            SectionBucket in order of first appearance
        """
        for line in lines:
            self.feed(line)
        return self.buckets


def classify_lines(lines: Iterable[str], taxonomy: Taxonomy) -> SectionBucket:
    """R: Convenience wrapper running a fresh classifier over lines."""
    return SectionClassifier(taxonomy).classify(lines)
