"""OpenAI chat completions client over plain HTTP."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from indigo.clients.base import IMAGE_MEDIA_TYPE, bounded, extract_tags
from indigo.errors import ProviderError

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
VISION_MODEL = "gpt-4o"


async def post_chat_completion(
    url: str,
    api_key: str,
    payload: dict,
    *,
    provider: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """POST an OpenAI-compatible chat request and return the first choice's content."""

    async def _call() -> dict:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        ) as client:
            response = await client.post(url, json=payload)
            response.raise_for_status()
            return response.json()

    data = await bounded(provider, timeout, _call())

    try:
        choices = data.get("choices") or []
        if not choices:
            return ""
        message = choices[0].get("message") or {}
        return message.get("content") or ""
    except AttributeError as e:
        raise ProviderError(f"{provider} returned a malformed response", provider=provider) from e


@dataclass
class OpenAIClient:
    """OpenAI models via the REST chat completions endpoint."""

    api_key: str
    model: str = "gpt-4o"
    timeout: int = 120
    base_url: str = OPENAI_API_URL
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def name(self) -> str:
        return "openai"

    async def _chat(self, model: str, content: str | list[dict]) -> str:
        payload = {"model": model, "messages": [{"role": "user", "content": content}]}
        return await post_chat_completion(
            self.base_url,
            self.api_key,
            payload,
            provider=self.name,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def complete(self, prompt: str) -> str:
        return await self._chat(self.model, prompt)

    async def generate_tags(self, text: str) -> list[str]:
        return await extract_tags(self.complete, text)

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        content = [
            {"type": "text", "text": prompt},
            {
                "type": "image_url",
                "image_url": {"url": f"data:{IMAGE_MEDIA_TYPE};base64,{image_b64}"},
            },
        ]
        return await self._chat(VISION_MODEL, content)
