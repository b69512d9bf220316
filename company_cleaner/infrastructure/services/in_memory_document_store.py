"""
Name: In-Memory Document Store

Responsibilities:
  - Implement DocumentSource and DocumentSink without network access
  - Paginate children listings exactly like the real API (cursor order)
  - Record created documents and append calls for assertions
  - Optionally fail or time out a given append call (partial-write scenarios)

Collaborators:
  - container.py: used when FAKE_DOCUMENT_STORE=1
  - tests: deterministic source/destination

Constraints:
  - Deterministic ids (doc-1, doc-2, ...)
  - Same per-request block bound as Notion
"""

from typing import Dict, List, Optional, Sequence

from ...config import NOTION_MAX_BATCH_BLOCKS
from ...domain.entities import ChildrenPage, ContentNode, OutputBlock
from ...exceptions import (
    CollaboratorReadError,
    CollaboratorTimeoutError,
    CollaboratorWriteError,
)


class InMemoryDocumentStore:
    """R: Dict-backed source tree plus destination documents."""

    def __init__(
        self,
        fail_on_append: Optional[int] = None,
        timeout_on_append: Optional[int] = None,
    ):
        self._children: Dict[str, List[ContentNode]] = {}
        self.documents: Dict[str, Dict[str, object]] = {}
        self.list_calls: List[tuple] = []
        self.append_calls: List[tuple] = []
        self.fail_on_append = fail_on_append
        self.timeout_on_append = timeout_on_append

    # ------------------------------------------------------------------
    # Source setup
    # ------------------------------------------------------------------

    def add_children(self, parent_id: str, nodes: Sequence[ContentNode]) -> None:
        self._children.setdefault(parent_id, []).extend(nodes)

    # ------------------------------------------------------------------
    # DocumentSource
    # ------------------------------------------------------------------

    async def list_children(
        self, node_id: str, *, page_size: int = 100, cursor: Optional[str] = None
    ) -> ChildrenPage:
        self.list_calls.append((node_id, cursor))
        if node_id not in self._children:
            raise CollaboratorReadError(f"Node {node_id} not found", status_code=404)

        children = self._children[node_id]
        start = int(cursor) if cursor else 0
        end = start + page_size
        has_more = end < len(children)
        return ChildrenPage(
            items=list(children[start:end]),
            has_more=has_more,
            next_cursor=str(end) if has_more else None,
        )

    # ------------------------------------------------------------------
    # DocumentSink
    # ------------------------------------------------------------------

    async def create_document(
        self, parent_id: str, title: str, blocks: Sequence[OutputBlock]
    ) -> str:
        self._check_batch(blocks)
        document_id = f"doc-{len(self.documents) + 1}"
        self.documents[document_id] = {
            "parent_id": parent_id,
            "title": title,
            "blocks": list(blocks),
        }
        return document_id

    async def append_blocks(self, document_id: str, blocks: Sequence[OutputBlock]) -> None:
        self._check_batch(blocks)
        self.append_calls.append((document_id, len(blocks)))
        if self.timeout_on_append is not None and len(self.append_calls) == self.timeout_on_append:
            raise CollaboratorTimeoutError(
                "Simulated append timeout", operation="append_blocks"
            )
        if self.fail_on_append is not None and len(self.append_calls) == self.fail_on_append:
            raise CollaboratorWriteError(
                "Simulated append failure", status_code=500, document_id=document_id
            )
        if document_id not in self.documents:
            raise CollaboratorWriteError(
                f"Document {document_id} not found", status_code=404
            )
        self.documents[document_id]["blocks"].extend(blocks)

    def blocks(self, document_id: str) -> List[OutputBlock]:
        return list(self.documents[document_id]["blocks"])

    @staticmethod
    def _check_batch(blocks: Sequence[OutputBlock]) -> None:
        if len(blocks) > NOTION_MAX_BATCH_BLOCKS:
            raise ValueError(
                f"At most {NOTION_MAX_BATCH_BLOCKS} blocks per request, got {len(blocks)}"
            )
