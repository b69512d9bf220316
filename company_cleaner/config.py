"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the destination platform limits

Collaborators:
  - main.py: reads settings for CORS and startup validation
  - container.py: reads settings for chunker, client and use case wiring
  - logger.py: reads log_level / log_json

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache for performance
  - Credentials are checked by validate_required(), called from the lifespan,
    so tests and the CLI can build Settings without a Notion token
"""

from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

# R: Hard limits of the Notion API
NOTION_MAX_BLOCK_TEXT = 2000
NOTION_MAX_BATCH_BLOCKS = 100
NOTION_MAX_PAGE_SIZE = 100


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/production/test)
        log_level: Logging level (default: INFO)
        log_json: Emit JSON logs (default: True)
        allowed_origins: Comma-separated CORS origins
        notion_token: Notion integration token
        notion_cleaned_parent_page_id: Parent page for cleaned documents
        notion_api_base_url: Notion REST base URL
        notion_version: Notion-Version header value
        request_timeout_seconds: Timeout for every collaborator call
        page_size: Children per listing request (max 100)
        chunk_size: Max characters per chunk (default: 1900)
        block_text_limit: Max characters per block payload (default: 2000)
        batch_size: Blocks per create/append request (max 100)
        retry_max_attempts: Attempts for rate-limited/5xx calls
        polish_enabled: Run the narrative polisher on section bodies
        google_api_key: Gemini API key (required when polishing)
        polish_model: Gemini model name
        polish_timeout_seconds: Timeout for one polish call
        dedupe_sentences: Drop repeated sentences inside a section
        taxonomy_path: Optional JSON taxonomy file (default: built-in)
        idempotent_runs: Skip re-creation for an unchanged fingerprint
        fake_document_store: Use the in-memory store (tests/local runs)
    """

    # Environment
    app_env: str = "development"
    log_level: str = "INFO"
    log_json: bool = True

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"

    # Notion
    notion_token: str = ""
    notion_cleaned_parent_page_id: str = ""
    notion_api_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    request_timeout_seconds: float = 30.0
    page_size: int = NOTION_MAX_PAGE_SIZE

    # Chunking / serialization limits
    chunk_size: int = 1900
    block_text_limit: int = NOTION_MAX_BLOCK_TEXT
    batch_size: int = NOTION_MAX_BATCH_BLOCKS

    # Retry/Resilience
    retry_max_attempts: int = 3
    retry_base_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 30.0

    # Narrative polishing
    polish_enabled: bool = False
    google_api_key: str = ""
    polish_model: str = "gemini-1.5-flash"
    polish_timeout_seconds: float = 60.0

    # Post-processing
    dedupe_sentences: bool = False
    taxonomy_path: str = ""
    idempotent_runs: bool = False

    # Testing/CI
    fake_document_store: bool = False

    @field_validator("chunk_size", "block_text_limit")
    @classmethod
    def size_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("chunk_size and block_text_limit must be greater than 0")
        return v

    @field_validator("block_text_limit")
    @classmethod
    def block_text_limit_within_platform(cls, v: int) -> int:
        if v > NOTION_MAX_BLOCK_TEXT:
            raise ValueError(
                f"block_text_limit must be <= {NOTION_MAX_BLOCK_TEXT}"
            )
        return v

    @field_validator("batch_size")
    @classmethod
    def batch_size_within_platform(cls, v: int) -> int:
        if v < 1 or v > NOTION_MAX_BATCH_BLOCKS:
            raise ValueError(
                f"batch_size must be between 1 and {NOTION_MAX_BATCH_BLOCKS}"
            )
        return v

    @field_validator("page_size")
    @classmethod
    def page_size_within_platform(cls, v: int) -> int:
        if v < 1 or v > NOTION_MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between 1 and {NOTION_MAX_PAGE_SIZE}"
            )
        return v

    @field_validator("request_timeout_seconds", "polish_timeout_seconds")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be greater than 0")
        return v

    @model_validator(mode="after")
    def validate_chunk_params(self):
        if self.chunk_size > self.block_text_limit:
            raise ValueError(
                f"chunk_size ({self.chunk_size}) must be <= "
                f"block_text_limit ({self.block_text_limit})"
            )
        return self

    def validate_required(self) -> None:
        """
        Check credentials and destination.

        Raises:
            ConfigurationError: If a required value is missing
        """
        if not self.fake_document_store:
            if not self.notion_token.strip():
                raise ConfigurationError("NOTION_TOKEN is not configured")
            if not self.notion_cleaned_parent_page_id.strip():
                raise ConfigurationError(
                    "NOTION_CLEANED_PARENT_PAGE_ID is not configured"
                )
        if self.polish_enabled and not self.google_api_key.strip():
            raise ConfigurationError(
                "GOOGLE_API_KEY is required when POLISH_ENABLED=1"
            )

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
