"""
Name: Output Block Serializer

Responsibilities:
  - Turn marked-up lines (or a ReassembledDocument) into OutputBlocks
  - Sniff each line's prefix to pick the block kind
  - Chunk long lines so every block payload fits the destination limit
  - Group blocks into request-sized batches

Collaborators:
  - domain.services.TextChunkerService: boundary-safe splitting
  - application.use_cases.clean_page: writes the batches in order

Constraints:
  - Every block payload <= block_text_limit
  - Block order equals line order; batches concatenate back to the input
  - Numbered items drop their ordinal; the destination numbers contiguous runs

Notes:
  - Inside a reassembled document, scope titles are heading_1, section
    titles heading_2 and any heading found in a section body heading_3
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..domain.entities import (
    SECTION_SEPARATOR,
    BlockKind,
    OutputBlock,
    ReassembledDocument,
    RichTextSpan,
)
from ..domain.services import TextChunkerService

_HEADINGS = (
    ("### ", BlockKind.HEADING_3),
    ("## ", BlockKind.HEADING_2),
    ("# ", BlockKind.HEADING_1),
)
_BULLET = re.compile(r"^[•\-*]\s+")
_ORDINAL = re.compile(r"^\d+[.)]\s+")
_CHECKBOX = re.compile(r"^\[([ xX])\]\s+")
_QUOTE = re.compile(r"^>\s+")
_CODE_FENCE = re.compile(r"^```[\w+-]*\s*(.*?)\s*```$")
# R: Short key, no sentence punctuation, then ": value"
_KEY_VALUE = re.compile(r"^([^:.!?]{1,40}):\s+(\S.*)$")


def _sniff(line: str) -> Tuple[BlockKind, str, bool]:
    """R: (kind, text without marker, checked) for one stripped line."""
    for marker, kind in _HEADINGS:
        if line.startswith(marker):
            return kind, line[len(marker) :].strip(), False

    if line == SECTION_SEPARATOR:
        return BlockKind.DIVIDER, "", False

    checkbox = _CHECKBOX.match(line)
    if checkbox:
        return BlockKind.TO_DO, line[checkbox.end() :], checkbox.group(1) != " "

    for pattern, kind in (
        (_BULLET, BlockKind.BULLETED_ITEM),
        (_ORDINAL, BlockKind.NUMBERED_ITEM),
        (_QUOTE, BlockKind.CALLOUT),
    ):
        match = pattern.match(line)
        if match:
            return kind, line[match.end() :], False

    fence = _CODE_FENCE.match(line)
    if fence:
        return BlockKind.CODE, fence.group(1), False

    return BlockKind.PARAGRAPH, line, False


def _key_value_spans(text: str) -> Optional[Tuple[RichTextSpan, ...]]:
    match = _KEY_VALUE.match(text)
    if not match:
        return None
    key, value = match.group(1).strip(), match.group(2)
    if not key:
        return None
    return (RichTextSpan(f"{key}:", bold=True), RichTextSpan(f" {value}"))


class BlockSerializer:
    """
    R: Serializes lines into size-safe OutputBlocks.

    Args:
        chunker: Splits text longer than its own limit
        block_text_limit: Hard per-block payload limit of the destination
    """

    def __init__(self, chunker: TextChunkerService, block_text_limit: int = 2000):
        if block_text_limit < 1:
            raise ValueError(f"block_text_limit must be >= 1, got {block_text_limit}")
        self.chunker = chunker
        self.block_text_limit = block_text_limit

    def serialize_line(self, line: str) -> List[OutputBlock]:
        stripped = line.strip()
        if not stripped:
            return []

        kind, text, checked = _sniff(stripped)
        if kind == BlockKind.DIVIDER:
            return [OutputBlock(kind=BlockKind.DIVIDER)]
        return self._wrap(kind, text, checked)

    def serialize_lines(self, lines: Sequence[str]) -> List[OutputBlock]:
        """R: Serialize lines in order; blank lines produce nothing."""
        blocks: List[OutputBlock] = []
        for line in lines:
            blocks.extend(self.serialize_line(line))
        return blocks

    def serialize(self, document: ReassembledDocument) -> List[OutputBlock]:
        """
        R: Serialize a reassembled document.

        Mirrors ReassembledDocument.to_lines(), with body headings demoted
        to heading_3 so the section hierarchy stays intact.
        """
        blocks: List[OutputBlock] = []
        current_scope = None
        for position, section in enumerate(document.sections):
            if position:
                blocks.append(OutputBlock(kind=BlockKind.DIVIDER))
            if section.key.scope != current_scope:
                current_scope = section.key.scope
                scope_title = document.scope_titles.get(current_scope)
                if scope_title:
                    blocks.extend(self._wrap(BlockKind.HEADING_1, scope_title))
            blocks.extend(self._wrap(BlockKind.HEADING_2, section.key.title))

            for line in section.text.split("\n"):
                for block in self.serialize_line(line):
                    if block.kind in (BlockKind.HEADING_1, BlockKind.HEADING_2):
                        block = OutputBlock(kind=BlockKind.HEADING_3, spans=block.spans)
                    blocks.append(block)
        return blocks

    def _wrap(self, kind: BlockKind, text: str, checked: bool = False) -> List[OutputBlock]:
        blocks: List[OutputBlock] = []
        for index, piece in enumerate(self.chunker.chunk(text)):
            if not piece:
                continue
            if len(piece) > self.block_text_limit:
                raise ValueError(
                    f"Chunk of {len(piece)} chars exceeds block limit "
                    f"{self.block_text_limit}; check chunk size settings"
                )
            spans = None
            if index == 0 and kind == BlockKind.PARAGRAPH:
                spans = _key_value_spans(piece)
            blocks.append(
                OutputBlock(
                    kind=kind,
                    spans=spans or (RichTextSpan(piece),),
                    checked=checked,
                )
            )
        return blocks


def batch_blocks(
    blocks: Sequence[OutputBlock], batch_size: int = 100
) -> List[List[OutputBlock]]:
    """
    R: Group blocks into ceil(N / batch_size) ordered batches.

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [
        list(blocks[start : start + batch_size])
        for start in range(0, len(blocks), batch_size)
    ]


def count_bytes(blocks: Sequence[OutputBlock]) -> int:
    """R: UTF-8 size of all block payloads."""
    return sum(len(block.text.encode("utf-8")) for block in blocks)
