"""
Name: Settings Unit Tests

Responsibilities:
  - Verify defaults match the destination platform limits
  - Verify field and cross-field validation
  - Verify credential checks in validate_required()
"""

import pytest
from pydantic import ValidationError

from company_cleaner.config import Settings, get_settings
from company_cleaner.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


class TestSettingsDefaults:
    def test_platform_limits(self):
        settings = Settings()

        assert settings.chunk_size == 1900
        assert settings.block_text_limit == 2000
        assert settings.batch_size == 100
        assert settings.page_size == 100
        assert settings.polish_enabled is False
        assert settings.idempotent_runs is False

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CHUNK_SIZE", "500")
        monkeypatch.setenv("FAKE_DOCUMENT_STORE", "1")

        settings = Settings()

        assert settings.chunk_size == 500
        assert settings.fake_document_store is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_allowed_origins_list(self):
        settings = Settings(allowed_origins=" http://a.test , ,http://b.test")
        assert settings.get_allowed_origins_list() == ["http://a.test", "http://b.test"]


class TestSettingsValidation:
    def test_chunk_size_cannot_exceed_block_limit(self):
        with pytest.raises(ValidationError, match="chunk_size"):
            Settings(chunk_size=2500)

    def test_block_limit_capped_by_platform(self):
        with pytest.raises(ValidationError):
            Settings(block_text_limit=2001)

    @pytest.mark.parametrize("field", ["batch_size", "page_size"])
    @pytest.mark.parametrize("value", [0, 101])
    def test_request_sizes_bounded(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(chunk_size=0)

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(request_timeout_seconds=0)


class TestValidateRequired:
    def test_missing_token(self):
        with pytest.raises(ConfigurationError, match="NOTION_TOKEN"):
            Settings().validate_required()

    def test_missing_parent_page(self):
        with pytest.raises(ConfigurationError, match="NOTION_CLEANED_PARENT_PAGE_ID"):
            Settings(notion_token="secret").validate_required()

    def test_complete_notion_config(self):
        Settings(
            notion_token="secret", notion_cleaned_parent_page_id="parent"
        ).validate_required()

    def test_fake_store_needs_no_credentials(self):
        Settings(fake_document_store=True).validate_required()

    def test_polishing_requires_api_key(self):
        with pytest.raises(ConfigurationError, match="GOOGLE_API_KEY"):
            Settings(fake_document_store=True, polish_enabled=True).validate_required()
