"""Pipeline stages (pure text processing) and the clean page use case"""

from .block_serializer import BlockSerializer, batch_blocks, count_bytes
from .block_text_extractor import BlockTextExtractor, extract_text, node_to_line
from .company_name import detect_company_name, page_title
from .content_hash import compute_run_fingerprint, normalize_text
from .document_reassembler import reassemble
from .line_normalizer import normalize_line, normalize_lines
from .section_classifier import SectionClassifier, classify_lines
from .sentence_dedupe import dedupe_sentences

__all__ = [
    "BlockSerializer",
    "BlockTextExtractor",
    "SectionClassifier",
    "batch_blocks",
    "classify_lines",
    "compute_run_fingerprint",
    "count_bytes",
    "dedupe_sentences",
    "detect_company_name",
    "extract_text",
    "node_to_line",
    "normalize_line",
    "normalize_lines",
    "normalize_text",
    "page_title",
    "reassemble",
]
