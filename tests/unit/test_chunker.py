"""
Name: Size-Safe Chunker Unit Tests

Responsibilities:
  - Test chunk_text boundary priority (paragraph > sentence > clause > word)
  - Verify the length bound, word integrity and round-trip properties
  - Test SentenceChunker and positional chunk labels

Collaborators:
  - company_cleaner.infrastructure.text.chunker: Module being tested

Notes:
  - Pure unit tests (no external dependencies)
"""

import pytest

from company_cleaner.infrastructure.text.chunker import (
    BOUNDARIES,
    SentenceChunker,
    chunk_text,
    split_keep_separators,
)

pytestmark = pytest.mark.unit


class TestChunkText:
    """Test suite for chunk_text function."""

    def test_sentences_are_packed_greedily(self):
        """R: Whole sentences accumulate until the next one would overflow."""
        assert chunk_text("One. Two. Three.", max_length=10) == ["One. Two.", "Three."]

    def test_empty_text_yields_single_empty_chunk(self):
        assert chunk_text("") == [""]

    def test_whitespace_only_yields_single_empty_chunk(self):
        assert chunk_text("   \n\t  ") == [""]

    def test_short_text_is_one_stripped_chunk(self):
        assert chunk_text("  Short text.  ", max_length=100) == ["Short text."]

    def test_exact_length_fits(self):
        text = "x" * 1900
        assert chunk_text(text, max_length=1900) == [text]

    def test_invalid_max_length_raises(self):
        with pytest.raises(ValueError, match="max_length must be >= 1"):
            chunk_text("text", max_length=0)

    def test_paragraph_boundary_preferred(self):
        """R: Paragraph breaks win over sentence breaks."""
        first = ("Alpha beta. " * 10).strip()
        second = ("Gamma delta. " * 9).strip()
        chunks = chunk_text(f"{first}\n\n{second}", max_length=150)

        assert chunks == [first, second]

    def test_clause_fallback_for_long_sentence(self):
        """R: A sentence longer than the limit splits at commas."""
        chunks = chunk_text("aaaa, bbbb, cccc, dddd", max_length=12)

        assert chunks == ["aaaa, bbbb,", "cccc, dddd"]

    def test_single_long_unpunctuated_sentence_falls_back_to_words(self):
        """R: 5000 chars, no punctuation, limit 1900 -> 3 word-safe chunks."""
        words = ["abcd"] * 1000
        text = " ".join(words)

        chunks = chunk_text(text, max_length=1900)

        assert len(chunks) == 3
        assert all(len(chunk) <= 1900 for chunk in chunks)
        for chunk in chunks:
            assert all(word == "abcd" for word in chunk.split())
        assert " ".join(chunks).split() == words

    def test_word_longer_than_limit_is_hard_split(self):
        assert chunk_text("x" * 25, max_length=10) == ["x" * 10, "x" * 10, "x" * 5]

    @pytest.mark.parametrize("max_length", [1, 5, 17, 64, 300])
    def test_length_bound_and_round_trip(self, max_length):
        """R: Every chunk fits and the chunks reproduce the words of the input."""
        text = (
            "Acme sells robots to warehouses. Customers include large grocers, "
            "parcel carriers and 3PLs!\n\nThe fleet software schedules routes; "
            "telemetry flows back hourly. Is it sticky? Very."
        )
        chunks = chunk_text(text, max_length=max_length)

        assert all(len(chunk) <= max_length for chunk in chunks)
        assert "".join(chunks).replace(" ", "").replace("\n", "") == text.replace(
            " ", ""
        ).replace("\n", "")

    def test_no_chunk_boundary_inside_a_word(self):
        text = "Warehouse robotics platforms coordinate autonomous mobile units."
        chunks = chunk_text(text, max_length=20)

        assert " ".join(chunks).split() == text.split()


class TestSplitKeepSeparators:
    def test_pieces_concatenate_back(self):
        text = "One. Two!  Three? Four"
        pieces = split_keep_separators(text, BOUNDARIES[1])

        assert "".join(pieces) == text
        assert pieces == ["One. ", "Two!  ", "Three? ", "Four"]

    def test_no_boundary_returns_whole_text(self):
        assert split_keep_separators("no breaks", BOUNDARIES[0]) == ["no breaks"]


class TestSentenceChunker:
    def test_chunk_delegates_to_chunk_text(self):
        chunker = SentenceChunker(max_length=10)
        assert chunker.chunk("One. Two. Three.") == ["One. Two.", "Three."]

    def test_chunk_parts_are_labelled(self):
        parts = SentenceChunker(max_length=10).chunk_parts("One. Two. Three.")

        assert [part.label for part in parts] == ["part 1 of 2", "part 2 of 2"]
        assert [part.content for part in parts] == ["One. Two.", "Three."]

    def test_invalid_max_length_fails_fast(self):
        with pytest.raises(ValueError):
            SentenceChunker(max_length=0)
