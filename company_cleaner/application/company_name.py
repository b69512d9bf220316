"""
Name: Company Name Detection

Responsibilities:
  - Pick the display name of the company a source page describes
  - Derive the destination page title from it

Notes:
  - Source exports carry a CLAY_RAW_<Name_With_Underscores> marker
"""

from __future__ import annotations

import re
from typing import Optional

DEFAULT_COMPANY_NAME = "Company"
TITLE_SUFFIX = "(Cleaned)"

_RAW_MARKER = re.compile(r"CLAY_RAW_(.+?)(?:\s|===|\n|$)", re.IGNORECASE)


def detect_company_name(
    text: str, hint: Optional[str] = None, default: str = DEFAULT_COMPANY_NAME
) -> str:
    """
    R: Resolve the company name.

    Priority: explicit hint, then the CLAY_RAW_ marker in text, then default.
    """
    if hint and hint.strip():
        return hint.strip()

    match = _RAW_MARKER.search(text or "")
    if match:
        name = match.group(1).replace("_", " ").strip()
        if name:
            return name
    return default


def page_title(company_name: str) -> str:
    return f"{company_name} {TITLE_SUFFIX}"
