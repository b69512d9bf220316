"""
Name: Narrative Polishers (Google Gemini + passthrough)

Responsibilities:
  - Implement NarrativePolisher with Google Gemini
  - Rewrite one section body into clean narrative prose without adding facts
  - Retry transient errors with exponential backoff + jitter
  - Provide the passthrough (identity) polisher used when polishing is off

Collaborators:
  - domain.services.NarrativePolisher: Interface implementation
  - google.generativeai: Google Gemini SDK
  - retry: Resilience helper for transient errors

Constraints:
  - Explicit request timeout
  - Failures raise PolishError; the use case decides to fall back

Notes:
  - One call per section body, sequential
"""

from typing import Optional

import google.generativeai as genai

from ...exceptions import ConfigurationError, PolishError
from ...logger import logger
from .retry import create_retry_decorator

PROMPT_TEMPLATE = """You are editing a research note about the company "{company}".
Rewrite the section below into clear, well-structured prose.
Keep every fact, number and name. Do not add information.
Keep list items as list items, one per line, prefixed with "- ".
Return only the rewritten text.

SECTION:
{text}
"""


class PassthroughPolisher:
    """R: Identity polisher (default when polishing is disabled)."""

    async def polish(self, raw_text: str, company_name_hint: str) -> str:
        return raw_text


class GoogleNarrativePolisher:
    """
    R: Google Gemini implementation of NarrativePolisher.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-1.5-flash",
        timeout_seconds: float = 60.0,
    ):
        """
        R: Initialize the Gemini polisher.

        Raises:
            ConfigurationError: If the API key is not configured
        """
        if not api_key:
            logger.error("GoogleNarrativePolisher: GOOGLE_API_KEY not configured")
            raise ConfigurationError("GOOGLE_API_KEY not configured")

        genai.configure(api_key=api_key)
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.model = genai.GenerativeModel(model_name)

        logger.info(
            "GoogleNarrativePolisher initialized", extra={"model": model_name}
        )

    def build_prompt(self, raw_text: str, company_name_hint: str) -> str:
        return PROMPT_TEMPLATE.format(company=company_name_hint, text=raw_text)

    async def polish(self, raw_text: str, company_name_hint: str) -> str:
        """
        R: Polish one section body.

        Raises:
            PolishError: If generation fails after retries
        """
        prompt = self.build_prompt(raw_text, company_name_hint)
        retry_decorator = create_retry_decorator(operation="polish")

        @retry_decorator
        async def _generate_with_retry(prompt_text: str) -> str:
            response = await self.model.generate_content_async(
                prompt_text, request_options={"timeout": self.timeout_seconds}
            )
            return response.text.strip()

        try:
            return await _generate_with_retry(prompt)
        except Exception as e:
            logger.error(f"GoogleNarrativePolisher: Generation failed: {e}")
            raise PolishError(f"Failed to polish section: {e}", original_error=e) from e
