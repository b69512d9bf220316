"""
Name: Size-Safe Text Chunker

Responsibilities:
  - Split arbitrarily long text into chunks no longer than a fixed limit
  - Break at paragraph, then sentence, then clause, then word boundaries
  - Never cut inside a word unless a single word exceeds the limit
  - Tag chunks with their position ("part i of n")

Collaborators:
  - application.block_serializer: wraps each chunk into one output block
  - domain.entities.Chunk: positional chunk value object

Constraints:
  - No overlap: chunks are consecutive slices of the input
  - Only whitespace at split points is dropped
  - Empty input yields a single empty chunk

Notes:
  - max_length=1900 leaves room under the 2000-char block payload limit
  - Priority: paragraph > sentence > clause > word > hard split

Algorithm:
  - Split the text into pieces at the current level, keeping separators
  - Greedily accumulate pieces while the stripped chunk stays within the limit
  - On overflow flush the current chunk; a piece that alone overflows is
    re-split at the next level with the same greedy rule
  - A word longer than the limit is hard-split (last resort)

Performance:
  - O(n * levels) where n = len(text)
"""

import re
from typing import List

from ...domain.entities import Chunk

# R: Boundaries in priority order (best to worst); each match ends a piece
BOUNDARIES: tuple[re.Pattern, ...] = (
    re.compile(r"\n[ \t]*\n\s*"),  # paragraph
    re.compile(r"[.!?]+[\"')\]]*\s+"),  # sentence
    re.compile(r"[,;:]\s+"),  # clause
    re.compile(r"\s+"),  # word
)


def split_keep_separators(text: str, boundary: re.Pattern) -> List[str]:
    """
    R: Split text after each boundary match, keeping the separator.

    "".join(result) == text always holds.
    """
    pieces: List[str] = []
    start = 0
    for match in boundary.finditer(text):
        if match.end() > start:
            pieces.append(text[start : match.end()])
            start = match.end()
    if start < len(text):
        pieces.append(text[start:])
    return pieces


def _hard_split(text: str, max_length: int) -> List[str]:
    return [text[i : i + max_length] for i in range(0, len(text), max_length)]


def _pack(text: str, max_length: int, level: int) -> List[str]:
    stripped = text.strip()
    if not stripped:
        return []
    if len(stripped) <= max_length:
        return [stripped]
    if level >= len(BOUNDARIES):
        return _hard_split(stripped, max_length)

    chunks: List[str] = []
    current = ""
    for piece in split_keep_separators(text, BOUNDARIES[level]):
        candidate = current + piece
        if len(candidate.strip()) <= max_length:
            current = candidate
            continue

        if current.strip():
            chunks.append(current.strip())
        current = ""

        if len(piece.strip()) <= max_length:
            current = piece
        else:
            # R: Piece alone overflows, fall back to the next boundary level
            chunks.extend(_pack(piece, max_length, level + 1))

    if current.strip():
        chunks.append(current.strip())
    return chunks


def chunk_text(text: str, max_length: int = 1900) -> List[str]:
    """
    R: Split text into boundary-safe chunks of at most max_length chars.

    Args:
        text: Text to split
        max_length: Maximum chunk length in characters (>= 1)

    Returns:
        Chunks in order, stripped; [""] for empty input

    Raises:
        ValueError: If max_length < 1

    Examples:
        >>> chunk_text("One. Two. Three.", max_length=10)
        ['One. Two.', 'Three.']
    """
    if max_length < 1:
        raise ValueError(f"max_length must be >= 1, got {max_length}")

    if not text or not text.strip():
        return [""]

    return _pack(text, max_length, level=0)


class SentenceChunker:
    """
    R: TextChunkerService implementation using chunk_text.

    Validates parameters on initialization to fail fast.
    """

    def __init__(self, max_length: int = 1900):
        if max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        self.max_length = max_length

    def chunk(self, text: str) -> List[str]:
        return chunk_text(text, max_length=self.max_length)

    def chunk_parts(self, text: str) -> List[Chunk]:
        """R: Same as chunk() but tagged with position in the sequence."""
        pieces = self.chunk(text)
        return [
            Chunk(content=piece, index=index, total=len(pieces))
            for index, piece in enumerate(pieces)
        ]
