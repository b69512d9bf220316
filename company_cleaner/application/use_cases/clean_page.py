"""
Name: Clean Page Use Case

Responsibilities:
  - Orchestrate one run: extract → normalize/classify → reassemble →
    (dedupe) → (polish) → serialize → create → append*
  - Detect the company name and title the destination page
  - Skip writing when an identical run already produced a page (optional)
  - Surface partial documents when a write fails mid-run

Collaborators:
  - domain/services.DocumentSource / DocumentSink: Notion (or in-memory)
  - domain/services.NarrativePolisher: optional text-to-text transform
  - domain/services.RunRegistry: optional fingerprint -> document id map
  - application/*: the pure pipeline stages
  - metrics.py: stage timings and run outcomes

Constraints:
  - Stages run strictly in sequence; batches are appended in order
  - Any hard failure aborts the run (no resume, no rollback)
  - Polishing never fails a run: errors and empty output fall back to the
    unpolished text

Notes:
  - The fingerprint is computed before polishing so it only depends on the
    source id and the canonical (deterministic) document text
"""

from dataclasses import dataclass
from typing import List, Optional
from uuid import uuid4

from ...context import run_id_var
from ...domain.entities import OutputBlock, ReassembledDocument
from ...domain.services import (
    DocumentSink,
    DocumentSource,
    NarrativePolisher,
    RunRegistry,
    TextChunkerService,
)
from ...domain.taxonomy import Taxonomy
from ...exceptions import (
    CleanerError,
    CollaboratorTimeoutError,
    CollaboratorWriteError,
    EmptySourceError,
)
from ...logger import logger
from ...metrics import record_run, stage_timer
from ..block_serializer import BlockSerializer, batch_blocks, count_bytes
from ..block_text_extractor import BlockTextExtractor, extract_text
from ..company_name import detect_company_name, page_title
from ..content_hash import compute_run_fingerprint
from ..document_reassembler import reassemble
from ..line_normalizer import normalize_lines
from ..section_classifier import SectionClassifier
from ..sentence_dedupe import dedupe_sentences


@dataclass
class CleanPageInput:
    source_id: str
    company_name: Optional[str] = None
    dry_run: bool = False


@dataclass
class CleanPageOutput:
    destination_id: Optional[str]
    company_name: str
    section_count: int
    block_count: int
    bytes_written: int
    fingerprint: str
    reused: bool = False
    document: Optional[ReassembledDocument] = None


class CleanPageUseCase:
    """
    R: Use case for cleaning one source page into a new destination page.
    """

    def __init__(
        self,
        source: DocumentSource,
        sink: DocumentSink,
        chunker: TextChunkerService,
        taxonomy: Taxonomy,
        *,
        destination_parent_id: str,
        polisher: Optional[NarrativePolisher] = None,
        run_registry: Optional[RunRegistry] = None,
        page_size: int = 100,
        batch_size: int = 100,
        block_text_limit: int = 2000,
        dedupe: bool = False,
    ):
        self.source = source
        self.sink = sink
        self.taxonomy = taxonomy
        self.destination_parent_id = destination_parent_id
        self.polisher = polisher
        self.run_registry = run_registry
        self.batch_size = batch_size
        self.dedupe = dedupe
        self.extractor = BlockTextExtractor(source, page_size=page_size)
        self.serializer = BlockSerializer(chunker, block_text_limit=block_text_limit)

    async def execute(self, input_data: CleanPageInput) -> CleanPageOutput:
        if not input_data.source_id or not input_data.source_id.strip():
            raise ValueError("source_id is required")

        token = run_id_var.set(uuid4().hex)
        try:
            output = await self._run(input_data)
        except CleanerError as e:
            record_run(e.error_code.lower())
            raise
        finally:
            run_id_var.reset(token)

        if output.reused:
            record_run("reused")
        elif output.destination_id is None:
            record_run("dry_run")
        else:
            record_run("created")
        return output

    async def _run(self, input_data: CleanPageInput) -> CleanPageOutput:
        source_id = input_data.source_id.strip()
        logger.info("Cleaning run started", extra={"source_id": source_id})

        with stage_timer("extract"):
            lines = await self.extractor.extract(source_id)
        raw_text = extract_text(lines)
        if not raw_text.strip():
            raise EmptySourceError(f"No text content found in source {source_id}")

        company_name = detect_company_name(raw_text, hint=input_data.company_name)

        with stage_timer("classify"):
            normalized = normalize_lines(
                (line.text for line in lines), self.taxonomy.noise_patterns
            )
            buckets = SectionClassifier(self.taxonomy).classify(normalized)
        if not normalized:
            raise EmptySourceError(
                f"Source {source_id} has no content left after normalization"
            )

        with stage_timer("reassemble"):
            document = reassemble(buckets, self.taxonomy)
            if self.dedupe:
                document = document.with_section_texts(
                    [dedupe_sentences(section.text) for section in document.sections]
                )
        if document.is_empty:
            raise EmptySourceError(f"Source {source_id} has headers but no section content")

        logger.info(
            "Document reassembled",
            extra={
                "stage": "reassemble",
                "lines": len(normalized),
                "sections": document.section_count,
            },
        )

        fingerprint = compute_run_fingerprint(source_id, document.canonical_text())
        if self.run_registry is not None and not input_data.dry_run:
            existing = self.run_registry.get(fingerprint)
            if existing:
                logger.info(
                    "Identical run found, reusing destination",
                    extra={"document_id": existing},
                )
                return CleanPageOutput(
                    destination_id=existing,
                    company_name=company_name,
                    section_count=document.section_count,
                    block_count=0,
                    bytes_written=0,
                    fingerprint=fingerprint,
                    reused=True,
                    document=document,
                )

        if self.polisher is not None:
            with stage_timer("polish"):
                document = await self._polish(document, company_name)

        with stage_timer("serialize"):
            blocks = self.serializer.serialize(document)
            batches = batch_blocks(blocks, self.batch_size)

        output = CleanPageOutput(
            destination_id=None,
            company_name=company_name,
            section_count=document.section_count,
            block_count=len(blocks),
            bytes_written=count_bytes(blocks),
            fingerprint=fingerprint,
            document=document,
        )
        if input_data.dry_run:
            return output

        output.destination_id = await self._write(company_name, batches)
        if self.run_registry is not None:
            self.run_registry.put(fingerprint, output.destination_id)

        logger.info(
            "Cleaning run finished",
            extra={
                "document_id": output.destination_id,
                "blocks": output.block_count,
                "batches": len(batches),
            },
        )
        return output

    async def _polish(
        self, document: ReassembledDocument, company_name: str
    ) -> ReassembledDocument:
        texts: List[str] = []
        for section in document.sections:
            texts.append(await self._polish_text(section.text, company_name, str(section.key)))
        return document.with_section_texts(texts)

    async def _polish_text(self, text: str, company_name: str, section: str) -> str:
        try:
            polished = await self.polisher.polish(text, company_name)
        except Exception as e:
            # R: Soft fallback, the run continues with the raw section text
            logger.warning(
                "Polishing failed, keeping raw text",
                extra={"section": section, "error": str(e)},
            )
            return text
        if not polished or not polished.strip():
            logger.warning("Polisher returned empty text, keeping raw text", extra={"section": section})
            return text
        return polished.strip()

    async def _write(self, company_name: str, batches: List[List[OutputBlock]]) -> str:
        first: List[OutputBlock] = batches[0] if batches else []

        with stage_timer("create"):
            document_id = await self.sink.create_document(
                self.destination_parent_id, page_title(company_name), first
            )

        with stage_timer("append"):
            for position, batch in enumerate(batches[1:], start=1):
                try:
                    await self.sink.append_blocks(document_id, batch)
                except CleanerError as e:
                    logger.error(
                        "Append failed, destination page is partial",
                        extra={
                            "document_id": document_id,
                            "batches_written": position,
                            "batches_total": len(batches),
                            "error_code": e.error_code,
                        },
                    )
                    if isinstance(e, CollaboratorTimeoutError):
                        e.document_id = document_id
                        e.batches_written = position
                        raise
                    raise CollaboratorWriteError(
                        f"Append of batch {position + 1}/{len(batches)} failed: {e.message}",
                        status_code=getattr(e, "status_code", None),
                        document_id=document_id,
                        batches_written=position,
                        original_error=e,
                    ) from e
        return document_id
