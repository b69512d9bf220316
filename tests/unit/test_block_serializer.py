"""
Name: Output Block Serializer Unit Tests

Responsibilities:
  - Verify prefix sniffing into block kinds
  - Verify key/value bolding and long-line chunking
  - Verify document serialization and batching
"""

import math

import pytest

from company_cleaner.application.block_serializer import (
    BlockSerializer,
    batch_blocks,
    count_bytes,
)
from company_cleaner.domain.entities import (
    BlockKind,
    OutputBlock,
    ReassembledDocument,
    ReassembledSection,
    RichTextSpan,
    Scope,
    SectionKey,
)
from company_cleaner.infrastructure.text import SentenceChunker

pytestmark = pytest.mark.unit


@pytest.fixture
def serializer(chunker) -> BlockSerializer:
    return BlockSerializer(chunker, block_text_limit=2000)


class TestSerializeLine:
    @pytest.mark.parametrize(
        "line, kind, text",
        [
            ("# Title", BlockKind.HEADING_1, "Title"),
            ("## Section", BlockKind.HEADING_2, "Section"),
            ("### Sub", BlockKind.HEADING_3, "Sub"),
            ("• Routing", BlockKind.BULLETED_ITEM, "Routing"),
            ("- Telemetry", BlockKind.BULLETED_ITEM, "Telemetry"),
            ("1. First", BlockKind.NUMBERED_ITEM, "First"),
            ("2) Second", BlockKind.NUMBERED_ITEM, "Second"),
            ("> Note well", BlockKind.CALLOUT, "Note well"),
            ("```python print(1)```", BlockKind.CODE, "print(1)"),
            ("Plain text.", BlockKind.PARAGRAPH, "Plain text."),
        ],
    )
    def test_prefix_selects_kind(self, serializer, line, kind, text):
        [block] = serializer.serialize_line(line)

        assert block.kind == kind
        assert block.text == text

    def test_divider(self, serializer):
        assert serializer.serialize_line("---") == [OutputBlock(kind=BlockKind.DIVIDER)]

    def test_checkboxes(self, serializer):
        [done] = serializer.serialize_line("[x] Ship v2")
        [todo] = serializer.serialize_line("[ ] Hire CFO")

        assert (done.kind, done.text, done.checked) == (BlockKind.TO_DO, "Ship v2", True)
        assert (todo.kind, todo.text, todo.checked) == (BlockKind.TO_DO, "Hire CFO", False)

    def test_blank_line_produces_nothing(self, serializer):
        assert serializer.serialize_line("   ") == []

    def test_key_value_paragraph_is_bolded(self, serializer):
        [block] = serializer.serialize_line("Revenue: $10M ARR")

        assert block.spans == (
            RichTextSpan("Revenue:", bold=True),
            RichTextSpan(" $10M ARR"),
        )
        assert block.text == "Revenue: $10M ARR"

    @pytest.mark.parametrize(
        "line",
        [
            "This is a sentence. Note: not a key",
            "A very long label that goes well past forty characters: value",
            "Ratio:5",
        ],
    )
    def test_non_key_value_lines_stay_plain(self, serializer, line):
        [block] = serializer.serialize_line(line)

        assert block.spans == (RichTextSpan(line),)

    def test_key_value_only_on_paragraphs(self, serializer):
        [block] = serializer.serialize_line("• Revenue: $10M")

        assert block.spans == (RichTextSpan("Revenue: $10M"),)

    def test_long_line_is_chunked_into_same_kind(self):
        serializer = BlockSerializer(SentenceChunker(max_length=50), block_text_limit=60)
        line = "• " + " ".join(["telemetry"] * 40)

        blocks = serializer.serialize_line(line)

        assert len(blocks) > 1
        assert all(block.kind == BlockKind.BULLETED_ITEM for block in blocks)
        assert all(block.text_length <= 50 for block in blocks)
        assert " ".join(block.text for block in blocks).split() == ["telemetry"] * 40

    def test_chunk_above_block_limit_raises(self):
        serializer = BlockSerializer(SentenceChunker(max_length=100), block_text_limit=50)

        with pytest.raises(ValueError, match="exceeds block limit"):
            serializer.serialize_line("x " * 60)

    def test_invalid_block_limit_raises(self, chunker):
        with pytest.raises(ValueError):
            BlockSerializer(chunker, block_text_limit=0)

    def test_serialize_lines_preserves_order(self, serializer):
        blocks = serializer.serialize_lines(["# T", "", "Body.", "---", "• item"])

        assert [block.kind for block in blocks] == [
            BlockKind.HEADING_1,
            BlockKind.PARAGRAPH,
            BlockKind.DIVIDER,
            BlockKind.BULLETED_ITEM,
        ]


class TestSerializeDocument:
    def test_document_structure(self, serializer, taxonomy):
        document = ReassembledDocument(
            sections=(
                ReassembledSection(
                    key=SectionKey(Scope.PRIMARY, "1. Company Snapshot"),
                    text="# Inner heading\nFounded 2015.",
                ),
                ReassembledSection(
                    key=SectionKey(Scope.SECONDARY, "1. Data Gravity Analysis"),
                    text="Score: 8/10",
                ),
            ),
            scope_titles=dict(taxonomy.scope_titles),
        )

        blocks = serializer.serialize(document)

        assert [(block.kind, block.text) for block in blocks] == [
            (BlockKind.HEADING_1, "Part 1: Company Overview"),
            (BlockKind.HEADING_2, "1. Company Snapshot"),
            (BlockKind.HEADING_3, "Inner heading"),
            (BlockKind.PARAGRAPH, "Founded 2015."),
            (BlockKind.DIVIDER, ""),
            (BlockKind.HEADING_1, "Part 2: Control Points Analysis"),
            (BlockKind.HEADING_2, "1. Data Gravity Analysis"),
            (BlockKind.PARAGRAPH, "Score: 8/10"),
        ]

    def test_every_payload_fits_the_limit(self, taxonomy):
        serializer = BlockSerializer(SentenceChunker(max_length=1900), block_text_limit=2000)
        long_text = ". ".join(f"Sentence {i} about warehouse robots" for i in range(400))
        document = ReassembledDocument(
            sections=(
                ReassembledSection(
                    key=SectionKey(Scope.PRIMARY, "2. Product Overview"), text=long_text
                ),
            ),
            scope_titles=dict(taxonomy.scope_titles),
        )

        blocks = serializer.serialize(document)

        assert len(blocks) > 3
        assert all(block.text_length <= 2000 for block in blocks)

    def test_empty_document(self, serializer):
        assert serializer.serialize(ReassembledDocument()) == []


class TestBatchBlocks:
    @pytest.mark.parametrize("count", [0, 1, 99, 100, 101, 250])
    def test_batch_count_and_order(self, count):
        blocks = [OutputBlock(BlockKind.PARAGRAPH, (RichTextSpan(str(i)),)) for i in range(count)]

        batches = batch_blocks(blocks, batch_size=100)

        assert len(batches) == math.ceil(count / 100)
        assert all(len(batch) <= 100 for batch in batches)
        assert [block for batch in batches for block in batch] == blocks

    def test_last_batch_holds_remainder(self):
        blocks = [OutputBlock(BlockKind.DIVIDER)] * 250

        assert [len(batch) for batch in batch_blocks(blocks)] == [100, 100, 50]

    def test_invalid_batch_size_raises(self):
        with pytest.raises(ValueError):
            batch_blocks([], batch_size=0)


class TestCountBytes:
    def test_counts_utf8_bytes(self):
        blocks = [
            OutputBlock(BlockKind.PARAGRAPH, (RichTextSpan("abc"),)),
            OutputBlock(BlockKind.PARAGRAPH, (RichTextSpan("é"),)),
            OutputBlock(BlockKind.DIVIDER),
        ]

        assert count_bytes(blocks) == 5
