"""Google Gemini client over the generateContent REST endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from indigo.clients.base import IMAGE_MEDIA_TYPE, bounded, extract_tags
from indigo.errors import ProviderError

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


@dataclass
class GeminiClient:
    """Gemini models. Text and inline image parts share one request shape."""

    api_key: str
    model: str = "gemini-2.0-flash-exp"
    timeout: int = 120
    base_url: str = GEMINI_API_BASE
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def name(self) -> str:
        return "gemini"

    async def _generate(self, parts: list[dict]) -> str:
        url = f"{self.base_url}/{self.model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": parts}]}

        async def _call() -> dict:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
                transport=self.transport,
            ) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                return response.json()

        data = await bounded(self.name, self.timeout, _call())
        if not isinstance(data, dict):
            raise ProviderError("gemini returned a malformed response", provider=self.name)

        # A blocked prompt comes back without candidates
        candidates = data.get("candidates") or []
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason", "no candidates")
            logger.error("Gemini returned no content: %s", reason)
            raise ProviderError(f"gemini returned no content ({reason})", provider=self.name)

        try:
            content = candidates[0].get("content") or {}
            return "".join(part.get("text") or "" for part in content.get("parts") or [])
        except (AttributeError, TypeError) as e:
            raise ProviderError(
                "gemini returned a malformed response", provider=self.name
            ) from e

    async def complete(self, prompt: str) -> str:
        return await self._generate([{"text": prompt}])

    async def generate_tags(self, text: str) -> list[str]:
        return await extract_tags(self.complete, text)

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        return await self._generate(
            [
                {"text": prompt},
                {"inline_data": {"mime_type": IMAGE_MEDIA_TYPE, "data": image_b64}},
            ]
        )
