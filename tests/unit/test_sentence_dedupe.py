"""
Unit tests for sentence de-duplication.
"""

import pytest

from company_cleaner.application.sentence_dedupe import dedupe_sentences

pytestmark = pytest.mark.unit


class TestDedupeSentences:
    def test_repeated_sentence_removed(self):
        assert dedupe_sentences("A is big. B is small. A is big.") == "A is big. B is small."

    def test_comparison_ignores_case_and_spacing(self):
        assert dedupe_sentences("Growth is up. growth   is up.") == "Growth is up."

    def test_repeats_across_lines(self):
        """R: A line emptied by removal is dropped."""
        assert dedupe_sentences("One fact.\nOne fact.\nTwo facts.") == "One fact.\nTwo facts."

    def test_near_duplicates_are_kept(self):
        text = "Revenue grew. Revenue grew fast."
        assert dedupe_sentences(text) == text

    def test_unique_text_unchanged(self):
        text = "• Routing\n• Telemetry"
        assert dedupe_sentences(text) == text

    def test_empty_text(self):
        assert dedupe_sentences("") == ""
