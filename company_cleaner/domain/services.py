"""
Name: Domain Service Interfaces

Responsibilities:
  - Define contracts for the external collaborators (document store, polisher)
  - Define the chunking and run-registry contracts
  - Enable dependency inversion (pipeline doesn't depend on Notion or Gemini)

Collaborators:
  - Implementations in infrastructure.services and infrastructure.text

Constraints:
  - Pure interfaces (Protocol), no implementation
  - Must not leak provider-specific details

Notes:
  - Using typing.Protocol for structural subtyping
  - Enables testing with in-memory fakes
"""

from typing import List, Optional, Protocol, Sequence

from .entities import ChildrenPage, OutputBlock


class DocumentSource(Protocol):
    """
    R: Read side of the document store.

    Implementations must return children in document order and a cursor for
    the next page while has_more is true.
    """

    async def list_children(
        self, node_id: str, *, page_size: int = 100, cursor: Optional[str] = None
    ) -> ChildrenPage:
        """
        R: List one page of the children of a node.

        Raises:
            CollaboratorReadError: On permission, rate limit or not-found errors
            CollaboratorTimeoutError: If the call exceeds the timeout
        """
        ...


class DocumentSink(Protocol):
    """R: Write side of the document store (append-only ordered children)."""

    async def create_document(
        self, parent_id: str, title: str, blocks: Sequence[OutputBlock]
    ) -> str:
        """
        R: Create a page under parent_id with up to 100 initial blocks.

        Returns:
            Id of the created document
        """
        ...

    async def append_blocks(
        self, document_id: str, blocks: Sequence[OutputBlock]
    ) -> None:
        """R: Append up to 100 blocks to the end of a document."""
        ...


class NarrativePolisher(Protocol):
    """R: Text-to-text transform applied to section bodies."""

    async def polish(self, raw_text: str, company_name_hint: str) -> str:
        ...


class TextChunkerService(Protocol):
    """
    R: Interface for text chunking.

    Implementations must provide:
      - Chunks no longer than the configured maximum
      - Deterministic output for same input
    """

    def chunk(self, text: str) -> List[str]:
        ...


class RunRegistry(Protocol):
    """R: Maps run fingerprints to the destination documents they produced."""

    def get(self, fingerprint: str) -> Optional[str]:
        ...

    def put(self, fingerprint: str, document_id: str) -> None:
        ...
