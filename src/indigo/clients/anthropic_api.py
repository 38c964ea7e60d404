"""Anthropic API client using the `anthropic` SDK."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import anthropic

from indigo.clients.base import IMAGE_MEDIA_TYPE, bounded, extract_tags

logger = logging.getLogger(__name__)


@dataclass
class AnthropicClient:
    """Claude models through the synchronous SDK, run off the event loop."""

    api_key: str
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 1024
    timeout: int = 120

    def __post_init__(self) -> None:
        self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout)

    @property
    def name(self) -> str:
        return "anthropic"

    async def _create(self, content: str | list[dict]) -> str:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": content}],
        }
        response = await bounded(
            self.name,
            self.timeout,
            asyncio.to_thread(self._client.messages.create, **kwargs),
        )
        if not response.content:
            return ""
        return getattr(response.content[0], "text", "") or ""

    async def complete(self, prompt: str) -> str:
        return await self._create(prompt)

    async def generate_tags(self, text: str) -> list[str]:
        return await extract_tags(self.complete, text)

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        return await self._create(
            [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": IMAGE_MEDIA_TYPE,
                        "data": image_b64,
                    },
                },
                {"type": "text", "text": prompt},
            ]
        )
