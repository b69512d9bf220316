"""
Name: Dependency Injection Container

Responsibilities:
  - Wire up dependencies for the application
  - Provide the factory for the clean page use case
  - Manage singleton instances of clients and services
  - Own the lifecycle of the Notion HTTP client

Collaborators:
  - infrastructure.services: NotionClient, InMemoryDocumentStore, polishers
  - infrastructure.text: SentenceChunker
  - domain.taxonomy: default or file taxonomy
  - application.use_cases: CleanPageUseCase
  - FastAPI Depends(): Dependency injection mechanism

Constraints:
  - Manual DI (no library like dependency-injector)
  - Singletons via functools.lru_cache
  - Environment-based configuration

Notes:
  - This is the composition root (where dependencies are wired)
  - Tests override get_clean_page_use_case or build the use case directly
"""

from functools import lru_cache
from typing import Optional, Union

from .application.use_cases import CleanPageUseCase
from .config import get_settings
from .domain.services import NarrativePolisher, RunRegistry, TextChunkerService
from .domain.taxonomy import Taxonomy, default_taxonomy, load_taxonomy
from .infrastructure.services import (
    GoogleNarrativePolisher,
    InMemoryDocumentStore,
    InMemoryRunRegistry,
    NotionClient,
    PassthroughPolisher,
)
from .infrastructure.text import SentenceChunker
from .logger import logger

DocumentStore = Union[NotionClient, InMemoryDocumentStore]

# R: Parent id used by the in-memory store when none is configured
LOCAL_PARENT_ID = "local-parent"


@lru_cache
def get_taxonomy() -> Taxonomy:
    """R: Built-in company-analysis taxonomy unless TAXONOMY_PATH is set."""
    settings = get_settings()
    if settings.taxonomy_path:
        logger.info("Loading taxonomy file", extra={"path": settings.taxonomy_path})
        return load_taxonomy(settings.taxonomy_path)
    return default_taxonomy()


@lru_cache
def get_chunker() -> TextChunkerService:
    return SentenceChunker(max_length=get_settings().chunk_size)


@lru_cache
def get_document_store() -> DocumentStore:
    """
    R: Get singleton document store (source and sink).

    Returns:
        InMemoryDocumentStore when FAKE_DOCUMENT_STORE=1, else NotionClient
    """
    settings = get_settings()
    if settings.fake_document_store:
        return InMemoryDocumentStore()
    return NotionClient(
        settings.notion_token,
        base_url=settings.notion_api_base_url,
        notion_version=settings.notion_version,
        timeout_seconds=settings.request_timeout_seconds,
        retry_max_attempts=settings.retry_max_attempts,
        retry_base_delay_seconds=settings.retry_base_delay_seconds,
        retry_max_delay_seconds=settings.retry_max_delay_seconds,
    )


@lru_cache
def get_polisher() -> NarrativePolisher:
    settings = get_settings()
    if settings.polish_enabled:
        return GoogleNarrativePolisher(
            settings.google_api_key,
            model_name=settings.polish_model,
            timeout_seconds=settings.polish_timeout_seconds,
        )
    return PassthroughPolisher()


@lru_cache
def get_run_registry() -> Optional[RunRegistry]:
    if get_settings().idempotent_runs:
        return InMemoryRunRegistry()
    return None


def get_clean_page_use_case() -> CleanPageUseCase:
    """R: Build the use case from the singleton collaborators."""
    settings = get_settings()
    store = get_document_store()
    parent_id = settings.notion_cleaned_parent_page_id
    if not parent_id and settings.fake_document_store:
        parent_id = LOCAL_PARENT_ID

    return CleanPageUseCase(
        source=store,
        sink=store,
        chunker=get_chunker(),
        taxonomy=get_taxonomy(),
        destination_parent_id=parent_id,
        polisher=get_polisher(),
        run_registry=get_run_registry(),
        page_size=settings.page_size,
        batch_size=settings.batch_size,
        block_text_limit=settings.block_text_limit,
        dedupe=settings.dedupe_sentences,
    )


async def close_clients() -> None:
    """R: Close the Notion HTTP client if one was created."""
    if get_document_store.cache_info().currsize:
        store = get_document_store()
        if isinstance(store, NotionClient):
            await store.aclose()
    reset_container()


def reset_container() -> None:
    """R: Drop all cached singletons (settings included)."""
    for factory in (
        get_taxonomy,
        get_chunker,
        get_document_store,
        get_polisher,
        get_run_registry,
        get_settings,
    ):
        factory.cache_clear()
