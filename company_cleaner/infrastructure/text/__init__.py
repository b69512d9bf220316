"""Text utilities (chunking)."""

from .chunker import BOUNDARIES, SentenceChunker, chunk_text, split_keep_separators

__all__ = [
    "BOUNDARIES",
    "SentenceChunker",
    "chunk_text",
    "split_keep_separators",
]
