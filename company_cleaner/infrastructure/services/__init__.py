"""Infrastructure services (Notion, Gemini, in-memory fakes, retry)"""

from .google_polisher import GoogleNarrativePolisher, PassthroughPolisher
from .in_memory_document_store import InMemoryDocumentStore
from .in_memory_run_registry import InMemoryRunRegistry
from .notion_client import NotionClient, block_to_node, output_block_to_json

__all__ = [
    "GoogleNarrativePolisher",
    "InMemoryDocumentStore",
    "InMemoryRunRegistry",
    "NotionClient",
    "PassthroughPolisher",
    "block_to_node",
    "output_block_to_json",
]
