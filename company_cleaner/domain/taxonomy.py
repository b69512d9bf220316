"""
Name: Section Taxonomy (rules-as-data)

Responsibilities:
  - Hold the locked, ordered table of contents for both scopes
  - Hold the ordered (pattern -> SectionKey) classification rules
  - Validate that every rule and the fallback point at a TOC entry
  - Load an external taxonomy from JSON (validated with pydantic)

Collaborators:
  - application.section_classifier: consumes rules and fallback
  - application.document_reassembler: consumes TOC order
  - application.line_normalizer: consumes noise patterns
  - container.py: chooses default or file taxonomy

Constraints:
  - The set of SectionKeys is fixed at construction time
  - Rules are tested in declared order; first match wins

Notes:
  - The default taxonomy is the company-analysis layout
    (Part 1: Company Overview, Part 2: Control Points Analysis)
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from ..exceptions import ConfigurationError
from .entities import Scope, SectionKey


@dataclass(frozen=True)
class SectionRule:
    pattern: re.Pattern
    key: SectionKey

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


class Taxonomy:
    """
    R: Locked table of contents plus classification rules.

    Raises:
        ConfigurationError: On duplicate titles or rules/fallback that
            reference a key outside the TOC
    """

    def __init__(
        self,
        *,
        primary_title: str,
        secondary_title: str,
        primary_toc: Sequence[str],
        secondary_toc: Sequence[str],
        rules: Sequence[Tuple[str, SectionKey]] | Sequence[SectionRule],
        fallback: SectionKey,
        noise_patterns: Iterable[str] = (),
    ):
        self.scope_titles = {Scope.PRIMARY: primary_title, Scope.SECONDARY: secondary_title}
        self._toc: dict[Scope, Tuple[SectionKey, ...]] = {
            Scope.PRIMARY: self._build_scope(Scope.PRIMARY, primary_toc),
            Scope.SECONDARY: self._build_scope(Scope.SECONDARY, secondary_toc),
        }
        self._valid_keys = frozenset(self.toc())

        self.rules: Tuple[SectionRule, ...] = tuple(
            self._build_rule(rule) for rule in rules
        )
        self.fallback = self._require(fallback)
        self.noise_patterns: Tuple[re.Pattern, ...] = tuple(
            _compile(pattern) for pattern in noise_patterns
        )

    @staticmethod
    def _build_scope(scope: Scope, titles: Sequence[str]) -> Tuple[SectionKey, ...]:
        if len(set(titles)) != len(titles):
            raise ConfigurationError(f"Duplicate section titles in {scope.value} scope")
        return tuple(SectionKey(scope, title) for title in titles)

    def _build_rule(self, rule) -> SectionRule:
        if isinstance(rule, SectionRule):
            return SectionRule(pattern=rule.pattern, key=self._require(rule.key))
        pattern, key = rule
        return SectionRule(pattern=_compile(pattern), key=self._require(key))

    def _require(self, key: SectionKey) -> SectionKey:
        if key not in self._valid_keys:
            raise ConfigurationError(f"Unknown section key: {key}")
        return key

    def key(self, scope: Scope, title: str) -> SectionKey:
        """R: Resolve a TOC entry by scope and title."""
        return self._require(SectionKey(scope, title))

    def toc(self, scope: Optional[Scope] = None) -> List[SectionKey]:
        """R: Keys in canonical order (primary scope, then secondary)."""
        if scope is not None:
            return list(self._toc[scope])
        return [*self._toc[Scope.PRIMARY], *self._toc[Scope.SECONDARY]]

    def __iter__(self) -> Iterator[SectionKey]:
        return iter(self.toc())

    def __contains__(self, key: object) -> bool:
        return key in self._valid_keys


def _compile(pattern: str | re.Pattern) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e


# ---------------------------------------------------------------------------
# Default company-analysis taxonomy
# ---------------------------------------------------------------------------

PRIMARY_TITLE = "Part 1: Company Overview"
SECONDARY_TITLE = "Part 2: Control Points Analysis"

PRIMARY_TOC = (
    "1. Company Snapshot",
    "2. Product Overview",
    "3. Vertical Specificity",
    "4. Customer Overview",
    "5. ICP Analysis",
    "6. Customer Jobs to be Done",
    "7. Customer Success Stories",
    "8. Market Overview",
    "9. TAM / SAM / SOM",
    "10. Competitive Analysis",
    "11. Competitive Market Map",
)

SECONDARY_TOC = (
    "1. Data Gravity Analysis",
    "2. Workflow Gravity Analysis",
    "3. Account Gravity Analysis",
    "4. Network Effects Analysis",
    "5. Ecosystem Control Points Analysis",
    "6. Product Extension Analysis",
    "7. Final Control Points Conclusions",
    "8. Final Total Score and Classification",
)

# R: Optional heading marker, then optional arabic/roman ordinal
_LEAD = r"^(?:#{1,3}\s*)?(?:(?:\d+|[ivx]+)[.)]\s*)?"
# R: Header lines carry nothing after the title except a colon
_TAIL = r"\s*:?\s*$"
# R: Phrase-led lines that are not score lines
_NO_SCORE = r"(?!.*\d+\s*/\s*\d+)"


def _heading(title: str) -> str:
    return f"{_LEAD}(?:{title}){_TAIL}"


def _phrase(phrase: str) -> str:
    return f"{_LEAD}{_NO_SCORE}{phrase}\\b"


_DEFAULT_RULES: Tuple[Tuple[str, str, str], ...] = (
    (_heading(r"company snapshot|business summary|company overview"), "primary", PRIMARY_TOC[0]),
    (_heading(r"product overview|key modules|features"), "primary", PRIMARY_TOC[1]),
    (_heading(r"vertical[- ]specific(?:ity)?(?:\s+capabilities)?"), "primary", PRIMARY_TOC[2]),
    (_heading(r"customer (?:overview|profile)"), "primary", PRIMARY_TOC[3]),
    (_heading(r"icp analysis|ideal customer profile"), "primary", PRIMARY_TOC[4]),
    (_heading(r"(?:customer\s+|key\s+)?jobs(?: to be done)?"), "primary", PRIMARY_TOC[5]),
    (_heading(r"(?:customer\s+)?success stories"), "primary", PRIMARY_TOC[6]),
    (_heading(r"market overview"), "primary", PRIMARY_TOC[7]),
    (_heading(r"tam\s*/\s*sam\s*/\s*som|tam|market size"), "primary", PRIMARY_TOC[8]),
    (_heading(r"competitive analysis|competitors"), "primary", PRIMARY_TOC[9]),
    (_heading(r"(?:competitive\s+)?market map"), "primary", PRIMARY_TOC[10]),
    (_phrase(r"data gravity"), "secondary", SECONDARY_TOC[0]),
    (_phrase(r"workflow gravity"), "secondary", SECONDARY_TOC[1]),
    (_phrase(r"account gravity"), "secondary", SECONDARY_TOC[2]),
    (_phrase(r"network effects?"), "secondary", SECONDARY_TOC[3]),
    (_phrase(r"ecosystem control points?"), "secondary", SECONDARY_TOC[4]),
    (_heading(r"ecosystem"), "secondary", SECONDARY_TOC[4]),
    (_phrase(r"product extension"), "secondary", SECONDARY_TOC[5]),
    (
        _heading(r"(?:final\s+)?control points?(?:\s+conclusions?)?"),
        "secondary",
        SECONDARY_TOC[6],
    ),
    (
        _heading(r"(?:final\s+)?(?:total\s+)?score(?:\s+and\s+classification)?"),
        "secondary",
        SECONDARY_TOC[7],
    ),
)

DEFAULT_NOISE_PATTERNS: Tuple[str, ...] = (
    r"^(?:[-*_]\s*){3,}$",
    r"^strategic takeaway:",
    r"^(?:#{1,3}\s*)?part\s+\d+\s*:",
    r"^clay_raw_\S*",
)


def default_taxonomy() -> Taxonomy:
    """R: Build the built-in company-analysis taxonomy."""
    return Taxonomy(
        primary_title=PRIMARY_TITLE,
        secondary_title=SECONDARY_TITLE,
        primary_toc=PRIMARY_TOC,
        secondary_toc=SECONDARY_TOC,
        rules=[
            (pattern, SectionKey(Scope(scope), title))
            for pattern, scope, title in _DEFAULT_RULES
        ],
        fallback=SectionKey(Scope.PRIMARY, PRIMARY_TOC[0]),
        noise_patterns=DEFAULT_NOISE_PATTERNS,
    )


# ---------------------------------------------------------------------------
# External taxonomy files
# ---------------------------------------------------------------------------


class ScopeSpec(BaseModel):
    scope: Scope
    title: str
    sections: List[str] = Field(min_length=1)


class KeySpec(BaseModel):
    scope: Scope
    title: str

    def to_key(self) -> SectionKey:
        return SectionKey(self.scope, self.title)


class RuleSpec(KeySpec):
    pattern: str


class TaxonomyFile(BaseModel):
    scopes: List[ScopeSpec] = Field(min_length=2, max_length=2)
    rules: List[RuleSpec]
    fallback: KeySpec
    noise_patterns: List[str] = Field(default_factory=list)


def load_taxonomy(path: str | Path) -> Taxonomy:
    """
    R: Load a taxonomy from a JSON file.

    Raises:
        ConfigurationError: If the file is missing, malformed or inconsistent
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        parsed = TaxonomyFile.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigurationError(f"Invalid taxonomy file {path}: {e}") from e

    scopes = {scope_spec.scope: scope_spec for scope_spec in parsed.scopes}
    if set(scopes) != {Scope.PRIMARY, Scope.SECONDARY}:
        raise ConfigurationError("Taxonomy must define one primary and one secondary scope")

    return Taxonomy(
        primary_title=scopes[Scope.PRIMARY].title,
        secondary_title=scopes[Scope.SECONDARY].title,
        primary_toc=scopes[Scope.PRIMARY].sections,
        secondary_toc=scopes[Scope.SECONDARY].sections,
        rules=[(rule.pattern, rule.to_key()) for rule in parsed.rules],
        fallback=parsed.fallback.to_key(),
        noise_patterns=parsed.noise_patterns,
    )
