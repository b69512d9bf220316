"""Domain layer exports"""

from .entities import (
    BlockKind,
    ChildrenPage,
    Chunk,
    ContentNode,
    NodeKind,
    OutputBlock,
    ReassembledDocument,
    ReassembledSection,
    RichTextSpan,
    Scope,
    SectionBucket,
    SectionKey,
    TextLine,
)
from .services import (
    DocumentSink,
    DocumentSource,
    NarrativePolisher,
    RunRegistry,
    TextChunkerService,
)
from .taxonomy import SectionRule, Taxonomy, default_taxonomy, load_taxonomy

__all__ = [
    "BlockKind",
    "ChildrenPage",
    "Chunk",
    "ContentNode",
    "NodeKind",
    "OutputBlock",
    "ReassembledDocument",
    "ReassembledSection",
    "RichTextSpan",
    "Scope",
    "SectionBucket",
    "SectionKey",
    "TextLine",
    "DocumentSink",
    "DocumentSource",
    "NarrativePolisher",
    "RunRegistry",
    "TextChunkerService",
    "SectionRule",
    "Taxonomy",
    "default_taxonomy",
    "load_taxonomy",
]
