"""Google Gemini backend using the google-genai SDK."""
from __future__ import annotations

import logging
from typing import Optional

from google import genai
from google.genai import types as genai_types

from itinerary_ai.core.config import ApiSettings, ProviderSettings
from itinerary_ai.core.errors import ProviderError
from itinerary_ai.core.schemas import LLMResponse
from itinerary_ai.core.validation import strip_code_fences
from itinerary_ai.services.providers.base import LLMProvider, register_provider

logger = logging.getLogger(__name__)

JSON_ONLY_SUFFIX = "IMPORTANT: Return ONLY valid JSON, no markdown or explanations."


@register_provider
class GeminiProvider(LLMProvider):
    """Gemini text generation; output is fence-stripped since JSON is not enforced."""

    name = "gemini"
    credential_field = "gemini_api_key"
    _TIMEOUT_MS = 60_000

    def __init__(self, settings: ProviderSettings, api_settings: ApiSettings) -> None:
        super().__init__(settings, api_settings)
        self._client: Optional[genai.Client] = None

    def build_client(self) -> genai.Client:
        """Return the shared client, creating it on first use."""

        if self._client is None:
            self._client = genai.Client(api_key=self.api_key(), http_options={"timeout": self._TIMEOUT_MS})
        return self._client

    async def call(self, system_prompt: str, user_message: str) -> LLMResponse:
        client = self.build_client()
        config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=self.settings.temperature,
            max_output_tokens=self.settings.max_tokens,
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=f"{user_message}\n\n{JSON_ONLY_SUFFIX}",
                config=config,
            )
        except Exception as exc:
            raise ProviderError(f"gemini call failed: {exc}", provider=self.name) from exc

        text = (response.text or "").strip()
        if not text:
            raise ProviderError("No content in gemini response", provider=self.name)

        usage = getattr(response, "usage_metadata", None)
        input_tokens = int(getattr(usage, "prompt_token_count", 0) or 0)
        output_tokens = int(getattr(usage, "candidates_token_count", 0) or 0)
        return LLMResponse(
            content=strip_code_fences(text),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            provider=self.name,
            model=self.model,
        )
