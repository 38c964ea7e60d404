"""Groq client for the OpenAI-compatible endpoint, text only."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from indigo.clients.base import extract_tags
from indigo.clients.openai_api import post_chat_completion

GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"

# Returned in place of an analysis; callers compare against this constant.
UNSUPPORTED_IMAGE_MESSAGE = (
    "Image analysis not supported for Groq provider. Please use OpenAI, Anthropic, or Gemini."
)


@dataclass
class GroqClient:
    """Groq-hosted models. Lowest tier: no vision support."""

    api_key: str
    model: str = "mixtral-8x7b-32768"
    timeout: int = 120
    base_url: str = GROQ_API_URL
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def name(self) -> str:
        return "groq"

    async def complete(self, prompt: str) -> str:
        payload = {"messages": [{"role": "user", "content": prompt}], "model": self.model}
        return await post_chat_completion(
            self.base_url,
            self.api_key,
            payload,
            provider=self.name,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def generate_tags(self, text: str) -> list[str]:
        return await extract_tags(self.complete, text)

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        return UNSUPPORTED_IMAGE_MESSAGE
