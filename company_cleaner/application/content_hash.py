"""
Name: Content Hash (run fingerprints)

Responsibilities:
  - Normalize text for deterministic hashing (NFC, trim, collapse whitespace)
  - Compute the run fingerprint over (source id, canonical content)

Collaborators:
  - application.use_cases.clean_page: keys idempotent runs by fingerprint
  - application.sentence_dedupe: reuses normalize_text for sentence identity

Constraints:
  - Pure functions (no IO, no side effects)
  - No lowercasing: case is part of the content
"""

from __future__ import annotations

import hashlib
import re
import unicodedata


def normalize_text(text: str) -> str:
    """
    Normalize text for deterministic hashing.

    Steps:
      1. NFC unicode (canonical form C).
      2. Strip leading/trailing whitespace.
      3. Collapse internal whitespace (tabs, newlines, runs of spaces) to one space.
    """
    normalized = unicodedata.normalize("NFC", text)
    normalized = normalized.strip()
    normalized = re.sub(r"\s+", " ", normalized)
    return normalized


def compute_run_fingerprint(source_id: str, canonical_text: str) -> str:
    """
    SHA-256 over source id + normalized canonical document text.

    Payload format: "{source_id}:{normalized_text}"
    Returns: 64-char hex digest.
    """
    payload = f"{source_id.strip()}:{normalize_text(canonical_text)}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
