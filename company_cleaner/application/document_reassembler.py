"""
Name: Document Reassembler

Responsibilities:
  - Order classified buckets by the canonical table of contents
  - Drop empty sections (no placeholders)

Collaborators:
  - domain.taxonomy.Taxonomy: TOC order and scope titles
  - domain.entities.ReassembledDocument: rendering (headers, separators)

Constraints:
  - Output order depends only on the TOC, never on classification order
"""

from __future__ import annotations

from typing import List

from ..domain.entities import ReassembledDocument, ReassembledSection, SectionBucket
from ..domain.taxonomy import Taxonomy


def reassemble(buckets: SectionBucket, taxonomy: Taxonomy) -> ReassembledDocument:
    """
    R: Build the reassembled document from classified buckets.

    Buckets whose keys are not in the taxonomy are ignored.
    """
    sections: List[ReassembledSection] = []
    for key in taxonomy.toc():
        lines = [line for line in buckets.lines(key) if line.strip()]
        if not lines:
            continue
        sections.append(ReassembledSection(key=key, text="\n".join(lines)))

    return ReassembledDocument(
        sections=tuple(sections), scope_titles=dict(taxonomy.scope_titles)
    )
