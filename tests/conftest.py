"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Isolate tests from the developer's .env file and environment
  - Provide the default taxonomy, an in-memory store and node factories
  - Build a ready-to-run CleanPageUseCase over the in-memory store

Collaborators:
  - pytest / pytest-asyncio: Test framework
  - company_cleaner.infrastructure.services.InMemoryDocumentStore

Notes:
  - Fixtures are auto-discovered by pytest
  - Use @pytest.fixture(scope="function") for per-test isolation
"""

import os
import sys
from pathlib import Path
from typing import List
from uuid import uuid4

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from company_cleaner import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from company_cleaner.application.use_cases import CleanPageUseCase  # noqa: E402
from company_cleaner.domain.entities import ContentNode, NodeKind  # noqa: E402
from company_cleaner.domain.taxonomy import Taxonomy, default_taxonomy  # noqa: E402
from company_cleaner.infrastructure.services import InMemoryDocumentStore  # noqa: E402
from company_cleaner.infrastructure.text import SentenceChunker  # noqa: E402

os.environ.setdefault("APP_ENV", "test")

_ENV_KEYS = (
    "NOTION_TOKEN",
    "NOTION_CLEANED_PARENT_PAGE_ID",
    "GOOGLE_API_KEY",
    "POLISH_ENABLED",
    "FAKE_DOCUMENT_STORE",
    "IDEMPOTENT_RUNS",
    "DEDUPE_SENTENCES",
    "TAXONOMY_PATH",
    "CHUNK_SIZE",
    "BLOCK_TEXT_LIMIT",
    "BATCH_SIZE",
    "PAGE_SIZE",
)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """R: Every test starts from defaults, with fresh singletons."""
    from company_cleaner.container import reset_container

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_container()
    yield
    reset_container()


# ============================================================================
# Domain Fixtures
# ============================================================================


def make_node(
    kind: NodeKind,
    text: str = "",
    *,
    has_children: bool = False,
    checked: bool = False,
    node_id: str | None = None,
) -> ContentNode:
    """R: Build a ContentNode with a unique id."""
    return ContentNode(
        id=node_id or f"node-{uuid4().hex[:12]}",
        kind=kind,
        spans=(text,) if text else (),
        has_children=has_children,
        checked=checked,
    )


def paragraphs(*texts: str) -> List[ContentNode]:
    return [make_node(NodeKind.PARAGRAPH, text) for text in texts]


@pytest.fixture
def taxonomy() -> Taxonomy:
    return default_taxonomy()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def chunker() -> SentenceChunker:
    return SentenceChunker(max_length=1900)


@pytest.fixture
def use_case(store, chunker, taxonomy) -> CleanPageUseCase:
    """R: Use case wired to the in-memory store (no polisher, no registry)."""
    return CleanPageUseCase(
        source=store,
        sink=store,
        chunker=chunker,
        taxonomy=taxonomy,
        destination_parent_id="parent-1",
    )


@pytest.fixture
def company_page(store) -> str:
    """R: A small company page with preamble, two sections and a nested list."""
    heading = make_node(NodeKind.HEADING_2, "Product Overview", has_children=False)
    bullets_parent = make_node(NodeKind.TOGGLE, "Key modules", has_children=True)
    store.add_children(
        "page-1",
        [
            make_node(NodeKind.PARAGRAPH, "CLAY_RAW_Acme_Robotics ===== EXPORT ====="),
            make_node(NodeKind.PARAGRAPH, "Acme builds warehouse robots."),
            heading,
            make_node(NodeKind.PARAGRAPH, "Fleet management platform."),
            bullets_parent,
            make_node(NodeKind.HEADING_2, "Data Gravity Analysis"),
            make_node(NodeKind.PARAGRAPH, "Data Gravity Score: 8/10"),
        ],
    )
    store.add_children(
        bullets_parent.id,
        [
            make_node(NodeKind.BULLETED_ITEM, "Routing"),
            make_node(NodeKind.BULLETED_ITEM, "Telemetry"),
        ],
    )
    return "page-1"
