"""
Name: Block-Text Extractor

Responsibilities:
  - Walk the source tree depth-first, pre-order (node before its children)
  - Drain every paginated children listing strictly in cursor order
  - Turn each node into at most one marked-up TextLine

Collaborators:
  - domain.services.DocumentSource: paginated list-children call
  - application.line_normalizer: consumes the produced lines

Constraints:
  - Pure read, no side effects
  - Collaborator errors propagate unchanged (no partial results)
  - Code, media, dividers and unknown kinds produce no line, but their
    children are still visited

Notes:
  - Numbered items all get the same generic ordinal; the destination
    renumbers contiguous runs
"""

from __future__ import annotations

from typing import List, Optional

from ..domain.entities import ContentNode, NodeKind, TextLine
from ..domain.services import DocumentSource
from ..logger import logger

BULLET_MARKER = "• "
ORDINAL_MARKER = "1. "
QUOTE_MARKER = "> "
CHECKED_MARKER = "[x] "
UNCHECKED_MARKER = "[ ] "

_HEADING_MARKERS = {
    NodeKind.HEADING_1: "# ",
    NodeKind.HEADING_2: "## ",
    NodeKind.HEADING_3: "### ",
}

_PREFIXES = {
    **_HEADING_MARKERS,
    NodeKind.BULLETED_ITEM: BULLET_MARKER,
    NodeKind.NUMBERED_ITEM: ORDINAL_MARKER,
    NodeKind.QUOTE: QUOTE_MARKER,
    NodeKind.PARAGRAPH: "",
    NodeKind.CALLOUT: "",
    NodeKind.TOGGLE: "",
}


def node_to_line(node: ContentNode) -> Optional[TextLine]:
    """
    R: Render one node as a marked-up line.

    Returns:
        TextLine, or None for excluded kinds and empty text
    """
    text = node.plain_text
    if not text.strip():
        return None

    if node.kind == NodeKind.CHECKBOX_ITEM:
        marker = CHECKED_MARKER if node.checked else UNCHECKED_MARKER
        return TextLine(text=f"{marker}{text}", kind=node.kind)

    prefix = _PREFIXES.get(node.kind)
    if prefix is None:
        return None
    return TextLine(text=f"{prefix}{text}", kind=node.kind)


class BlockTextExtractor:
    """
    R: Flattens a source subtree into ordered TextLines.
    """

    def __init__(self, source: DocumentSource, page_size: int = 100):
        self.source = source
        self.page_size = page_size

    async def list_all_children(self, node_id: str) -> List[ContentNode]:
        """R: Drain the paginated listing of one node, in cursor order."""
        children: List[ContentNode] = []
        cursor: Optional[str] = None
        while True:
            page = await self.source.list_children(
                node_id, page_size=self.page_size, cursor=cursor
            )
            children.extend(page.items)
            if not page.has_more or not page.next_cursor:
                return children
            cursor = page.next_cursor

    async def extract(self, root_id: str) -> List[TextLine]:
        """
        R: Extract every line under root_id in document order.

        Raises:
            CollaboratorReadError / CollaboratorTimeoutError from the source
        """
        lines: List[TextLine] = []
        visited = await self._walk(root_id, lines)
        logger.info(
            "Source extracted",
            extra={"source_id": root_id, "nodes": visited, "lines": len(lines)},
        )
        return lines

    async def _walk(self, node_id: str, lines: List[TextLine]) -> int:
        visited = 0
        for node in await self.list_all_children(node_id):
            visited += 1
            line = node_to_line(node)
            if line is not None:
                lines.append(line)
            if node.has_children:
                visited += await self._walk(node.id, lines)
        return visited


def extract_text(lines: List[TextLine]) -> str:
    """R: Join extracted lines into one newline-separated string."""
    return "\n".join(line.text for line in lines)
