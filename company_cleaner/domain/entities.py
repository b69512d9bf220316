"""
Name: Domain Entities

Responsibilities:
  - Represent source nodes, extracted lines and section keys
  - Represent the reassembled document, chunks and output blocks
  - Keep the pipeline's value objects immutable where possible

Collaborators:
  - application: produces and consumes these entities
  - infrastructure.services.notion_client: maps Notion JSON to/from them

Constraints:
  - No I/O, no provider-specific JSON
  - Every entity lives for a single run; nothing is persisted except the
    OutputBlocks written to the destination

Notes:
  - NodeKind / BlockKind values match Notion block type names
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class NodeKind(str, Enum):
    """Structural kind of a source node."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_ITEM = "bulleted_list_item"
    NUMBERED_ITEM = "numbered_list_item"
    QUOTE = "quote"
    CALLOUT = "callout"
    TOGGLE = "toggle"
    CHECKBOX_ITEM = "to_do"
    CODE = "code"
    OTHER = "other"

    @classmethod
    def from_type(cls, block_type: str) -> "NodeKind":
        try:
            return cls(block_type)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class ContentNode:
    """A node of the source tree. Read-only for the pipeline."""

    id: str
    kind: NodeKind
    spans: Tuple[str, ...] = ()
    has_children: bool = False
    checked: bool = False

    @property
    def plain_text(self) -> str:
        return "".join(self.spans)


@dataclass(frozen=True)
class ChildrenPage:
    """One page of a paginated children listing."""

    items: List[ContentNode]
    has_more: bool = False
    next_cursor: Optional[str] = None


@dataclass(frozen=True)
class TextLine:
    """A single extracted line plus the kind of the node it came from."""

    text: str
    kind: NodeKind


class Scope(str, Enum):
    """Top-level parts of the locked table of contents."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True, order=True)
class SectionKey:
    """Canonical (scope, title) identifier of one table-of-contents entry."""

    scope: Scope
    title: str

    def __str__(self) -> str:
        return f"{self.scope.value}:{self.title}"


class SectionBucket:
    """
    Ordered SectionKey -> lines mapping built by one classification pass.

    Insertion order is the order keys were first opened, not TOC order.
    """

    def __init__(self) -> None:
        self._lines: Dict[SectionKey, List[str]] = {}

    def open(self, key: SectionKey) -> None:
        self._lines.setdefault(key, [])

    def append(self, key: SectionKey, line: str) -> None:
        self._lines.setdefault(key, []).append(line)

    def lines(self, key: SectionKey) -> List[str]:
        return list(self._lines.get(key, []))

    def keys(self) -> List[SectionKey]:
        return list(self._lines)

    def line_count(self) -> int:
        return sum(len(lines) for lines in self._lines.values())

    def __contains__(self, key: object) -> bool:
        return key in self._lines

    def __len__(self) -> int:
        return len(self._lines)


SECTION_SEPARATOR = "---"


@dataclass(frozen=True)
class ReassembledSection:
    key: SectionKey
    text: str


@dataclass(frozen=True)
class ReassembledDocument:
    """Non-empty sections in canonical table-of-contents order."""

    sections: Tuple[ReassembledSection, ...] = ()
    scope_titles: Dict[Scope, str] = field(default_factory=dict)

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def keys(self) -> List[SectionKey]:
        return [section.key for section in self.sections]

    def to_lines(self) -> List[str]:
        """
        Render as marked-up lines: scope heading once per populated scope,
        section heading, body lines, separator. No trailing separator.
        """
        lines: List[str] = []
        current_scope: Optional[Scope] = None
        for section in self.sections:
            if section.key.scope != current_scope:
                current_scope = section.key.scope
                scope_title = self.scope_titles.get(current_scope)
                if scope_title:
                    lines.append(f"# {scope_title}")
            lines.append(f"## {section.key.title}")
            lines.extend(line for line in section.text.split("\n") if line.strip())
            lines.append(SECTION_SEPARATOR)

        while lines and lines[-1] == SECTION_SEPARATOR:
            lines.pop()
        return lines

    def canonical_text(self) -> str:
        return "\n".join(self.to_lines())

    def with_section_texts(self, texts: List[str]) -> "ReassembledDocument":
        """Copy with section bodies replaced (same keys, same order)."""
        if len(texts) != len(self.sections):
            raise ValueError("texts must match sections one to one")
        return ReassembledDocument(
            sections=tuple(
                ReassembledSection(key=section.key, text=text)
                for section, text in zip(self.sections, texts)
            ),
            scope_titles=dict(self.scope_titles),
        )


@dataclass(frozen=True)
class Chunk:
    """A length-bounded piece of a larger text, "part i of n"."""

    content: str
    index: int
    total: int

    @property
    def label(self) -> str:
        return f"part {self.index + 1} of {self.total}"


class BlockKind(str, Enum):
    """Destination block kinds."""

    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_ITEM = "bulleted_list_item"
    NUMBERED_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    CALLOUT = "callout"
    CODE = "code"
    DIVIDER = "divider"


@dataclass(frozen=True)
class RichTextSpan:
    text: str
    bold: bool = False


@dataclass(frozen=True)
class OutputBlock:
    """One serialized block handed to the destination."""

    kind: BlockKind
    spans: Tuple[RichTextSpan, ...] = ()
    checked: bool = False

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)

    @property
    def text_length(self) -> int:
        return len(self.text)
