"""Model client protocol and shared helpers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar, runtime_checkable

from indigo.errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TAG_PROMPT = (
    "Extract 3-5 relevant gardening tags from this text. "
    "Return only the tags as a comma-separated list.\n\nText: {text}"
)

IMAGE_MEDIA_TYPE = "image/jpeg"


@runtime_checkable
class ModelClient(Protocol):
    """Protocol that all model provider backends must implement."""

    @property
    def name(self) -> str: ...

    async def complete(self, prompt: str) -> str:
        """Send a prompt and return the single textual completion."""
        ...

    async def generate_tags(self, text: str) -> list[str]:
        """Derive short labels for a journal entry."""
        ...

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        """Analyze a base64-encoded JPEG image with a text prompt."""
        ...


def split_tags(response: str) -> list[str]:
    """Split a comma-separated model response into trimmed tags.

    Whatever the model returned is kept as-is, including empty pieces.
    """
    return [tag.strip() for tag in response.split(",")]


async def extract_tags(complete: Callable[[str], Awaitable[str]], text: str) -> list[str]:
    response = await complete(TAG_PROMPT.format(text=text))
    return split_tags(response)


async def bounded(provider: str, timeout: float, call: Awaitable[T]) -> T:
    """Await a remote call, turning timeouts and transport failures into ProviderError."""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("%s call timed out after %ss", provider, timeout)
        raise ProviderError(f"{provider} did not respond within {timeout}s", provider=provider)
    except ProviderError:
        raise
    except Exception as e:
        logger.error("%s API error: %s", provider, e)
        raise ProviderError(f"{provider} API error: {e}", provider=provider) from e
