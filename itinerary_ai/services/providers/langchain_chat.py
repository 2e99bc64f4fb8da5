"""Chat-completion backends built on LangChain chat models."""
from __future__ import annotations

import json
import logging
from abc import abstractmethod
from typing import Any, List

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from langchain_xai import ChatXAI

from itinerary_ai.core.errors import ProviderError
from itinerary_ai.core.schemas import LLMResponse
from itinerary_ai.core.validation import strip_code_fences
from itinerary_ai.services.providers.base import LLMProvider, register_provider, usage_from_metadata

logger = logging.getLogger(__name__)


def _message_text(message: AIMessage) -> str:
    content = message.content
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        text_chunks: List[str] = []
        for chunk in content:
            if isinstance(chunk, dict) and chunk.get("type") == "text":
                text_chunks.append(chunk.get("text", ""))
            elif isinstance(chunk, str):
                text_chunks.append(chunk)
        return "\n".join(text_chunks)
    if isinstance(content, dict):
        return json.dumps(content)
    return "" if content is None else str(content)


class LangChainChatProvider(LLMProvider):
    """Shared call path for providers exposed as LangChain chat models."""

    native_json: bool = False

    @abstractmethod
    def build_llm(self) -> Any:
        """Return the configured LangChain chat model."""

    async def call(self, system_prompt: str, user_message: str) -> LLMResponse:
        llm = self.build_llm()
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]
        try:
            message = await llm.ainvoke(messages)
        except Exception as exc:
            raise ProviderError(f"{self.name} call failed: {exc}", provider=self.name) from exc

        text = _message_text(message).strip()
        if not text:
            raise ProviderError(f"No content in {self.name} response", provider=self.name)
        if not (self.native_json and self.settings.json_mode):
            text = strip_code_fences(text)

        input_tokens, output_tokens = usage_from_metadata(getattr(message, "usage_metadata", None))
        logger.debug(f"{self.name} response: {len(text)} chars, {input_tokens}/{output_tokens} tokens")
        return LLMResponse(
            content=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            provider=self.name,
            model=self.model,
        )


@register_provider
class OpenAIProvider(LangChainChatProvider):
    """OpenAI chat completions with JSON-object response format."""

    name = "openai"
    credential_field = "openai_api_key"
    native_json = True

    def build_llm(self) -> BaseChatModel:
        llm = ChatOpenAI(
            model=self.model,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            api_key=self.api_key(),
        )
        if self.settings.json_mode:
            return llm.bind(response_format={"type": "json_object"})
        return llm


@register_provider
class XAIProvider(LangChainChatProvider):
    """xAI Grok models through the LangChain integration."""

    name = "xai"
    credential_field = "xai_api_key"

    def build_llm(self) -> BaseChatModel:
        return ChatXAI(
            model=self.model,
            temperature=self.settings.temperature,
            max_tokens=self.settings.max_tokens,
            api_key=self.api_key(),
        )
