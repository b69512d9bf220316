"""
Name: Section Taxonomy Unit Tests

Responsibilities:
  - Verify the default table of contents and its header rules
  - Verify construction-time validation (unknown keys, duplicates, bad regex)
  - Verify loading external JSON taxonomies
"""

import json

import pytest

from company_cleaner.application.section_classifier import SectionClassifier
from company_cleaner.domain.entities import Scope, SectionKey
from company_cleaner.domain.taxonomy import (
    PRIMARY_TITLE,
    PRIMARY_TOC,
    SECONDARY_TITLE,
    SECONDARY_TOC,
    Taxonomy,
    load_taxonomy,
)
from company_cleaner.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


def _small_taxonomy(**overrides):
    kwargs = dict(
        primary_title="P",
        secondary_title="S",
        primary_toc=["A", "B"],
        secondary_toc=["C"],
        rules=[(r"^b$", SectionKey(Scope.PRIMARY, "B"))],
        fallback=SectionKey(Scope.PRIMARY, "A"),
    )
    kwargs.update(overrides)
    return Taxonomy(**kwargs)


class TestDefaultTaxonomy:
    def test_toc_order_is_primary_then_secondary(self, taxonomy):
        keys = taxonomy.toc()

        assert len(keys) == len(PRIMARY_TOC) + len(SECONDARY_TOC) == 19
        assert [key.title for key in keys[:11]] == list(PRIMARY_TOC)
        assert [key.title for key in keys[11:]] == list(SECONDARY_TOC)
        assert list(taxonomy) == keys

    def test_scope_titles(self, taxonomy):
        assert taxonomy.scope_titles == {
            Scope.PRIMARY: PRIMARY_TITLE,
            Scope.SECONDARY: SECONDARY_TITLE,
        }

    def test_fallback_is_company_snapshot(self, taxonomy):
        assert taxonomy.fallback == SectionKey(Scope.PRIMARY, "1. Company Snapshot")

    def test_key_lookup(self, taxonomy):
        key = taxonomy.key(Scope.SECONDARY, SECONDARY_TOC[3])
        assert key in taxonomy

    def test_key_lookup_unknown_raises(self, taxonomy):
        with pytest.raises(ConfigurationError):
            taxonomy.key(Scope.PRIMARY, "99. Nope")

    @pytest.mark.parametrize(
        "line, title",
        [
            ("## Company Snapshot", PRIMARY_TOC[0]),
            ("1. Company Snapshot", PRIMARY_TOC[0]),
            ("COMPANY OVERVIEW:", PRIMARY_TOC[0]),
            ("### Key Modules", PRIMARY_TOC[1]),
            ("Vertical-Specific Capabilities", PRIMARY_TOC[2]),
            ("Customer Profile", PRIMARY_TOC[3]),
            ("ICP Analysis", PRIMARY_TOC[4]),
            ("Jobs to be Done", PRIMARY_TOC[5]),
            ("IV. Key Jobs", PRIMARY_TOC[5]),
            ("Customer Success Stories", PRIMARY_TOC[6]),
            ("Market Overview", PRIMARY_TOC[7]),
            ("TAM / SAM / SOM", PRIMARY_TOC[8]),
            ("Competitive Analysis", PRIMARY_TOC[9]),
            ("Competitors", PRIMARY_TOC[9]),
            ("Competitive Market Map", PRIMARY_TOC[10]),
            ("Data Gravity", SECONDARY_TOC[0]),
            ("Workflow gravity deep dive", SECONDARY_TOC[1]),
            ("Account Gravity", SECONDARY_TOC[2]),
            ("Network Effects", SECONDARY_TOC[3]),
            ("Ecosystem Control Points", SECONDARY_TOC[4]),
            ("Ecosystem", SECONDARY_TOC[4]),
            ("Product Extension Analysis", SECONDARY_TOC[5]),
            ("Final Control Points Conclusions", SECONDARY_TOC[6]),
            ("Total Score", SECONDARY_TOC[7]),
        ],
    )
    def test_header_lines_match_expected_section(self, taxonomy, line, title):
        assert SectionClassifier(taxonomy).match(line).title == title

    @pytest.mark.parametrize(
        "line",
        [
            "Data Gravity Score: 8/10",
            "Total Score: 42/60",
            "Our product overview is broad.",
            "Ecosystem partners include Shopify.",
            "Features include routing and telemetry.",
            "The market overview shows growth.",
        ],
    )
    def test_content_lines_do_not_match(self, taxonomy, line):
        assert SectionClassifier(taxonomy).match(line) is None


class TestTaxonomyValidation:
    def test_rule_with_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown section key"):
            _small_taxonomy(rules=[(r"x", SectionKey(Scope.PRIMARY, "Z"))])

    def test_unknown_fallback_rejected(self):
        with pytest.raises(ConfigurationError):
            _small_taxonomy(fallback=SectionKey(Scope.SECONDARY, "A"))

    def test_duplicate_titles_rejected(self):
        with pytest.raises(ConfigurationError, match="Duplicate"):
            _small_taxonomy(primary_toc=["A", "A"])

    def test_invalid_pattern_rejected(self):
        with pytest.raises(ConfigurationError, match="Invalid pattern"):
            _small_taxonomy(rules=[(r"(", SectionKey(Scope.PRIMARY, "B"))])

    def test_patterns_are_case_insensitive(self):
        taxonomy = _small_taxonomy()
        assert taxonomy.rules[0].matches("B")


class TestLoadTaxonomy:
    @staticmethod
    def _payload():
        return {
            "scopes": [
                {"scope": "primary", "title": "Part A", "sections": ["Intro", "Body"]},
                {"scope": "secondary", "title": "Part B", "sections": ["Score"]},
            ],
            "rules": [
                {"scope": "primary", "title": "Body", "pattern": "^body$"},
                {"scope": "secondary", "title": "Score", "pattern": "^score$"},
            ],
            "fallback": {"scope": "primary", "title": "Intro"},
            "noise_patterns": ["^skip"],
        }

    def test_valid_file_loads(self, tmp_path):
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps(self._payload()), encoding="utf-8")

        taxonomy = load_taxonomy(path)

        assert [str(key) for key in taxonomy.toc()] == [
            "primary:Intro",
            "primary:Body",
            "secondary:Score",
        ]
        assert taxonomy.scope_titles[Scope.SECONDARY] == "Part B"
        assert taxonomy.fallback == SectionKey(Scope.PRIMARY, "Intro")
        assert len(taxonomy.noise_patterns) == 1

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid taxonomy file"):
            load_taxonomy(tmp_path / "missing.json")

    def test_malformed_json_raises(self, tmp_path):
        path = tmp_path / "taxonomy.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_taxonomy(path)

    def test_schema_violation_raises(self, tmp_path):
        payload = self._payload()
        del payload["fallback"]
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_taxonomy(path)

    def test_two_primary_scopes_rejected(self, tmp_path):
        payload = self._payload()
        payload["scopes"][1]["scope"] = "primary"
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        with pytest.raises(ConfigurationError, match="one primary and one secondary"):
            load_taxonomy(path)

    def test_rule_pointing_outside_toc_rejected(self, tmp_path):
        payload = self._payload()
        payload["rules"][0]["title"] = "Missing"
        path = tmp_path / "taxonomy.json"
        path.write_text(json.dumps(payload), encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_taxonomy(path)
