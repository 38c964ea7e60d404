"""Model clients, one per provider, selected by identifier."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from indigo.clients.anthropic_api import AnthropicClient
from indigo.clients.base import ModelClient, split_tags
from indigo.clients.gemini_api import GeminiClient
from indigo.clients.groq_api import UNSUPPORTED_IMAGE_MESSAGE, GroqClient
from indigo.clients.openai_api import OpenAIClient
from indigo.config import CREDENTIAL_ENV
from indigo.errors import ConfigurationError

if TYPE_CHECKING:
    from indigo.config import IndigoConfig

logger = logging.getLogger(__name__)

CLIENTS = {
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
    "gemini": GeminiClient,
    "groq": GroqClient,
}

__all__ = [
    "CLIENTS",
    "UNSUPPORTED_IMAGE_MESSAGE",
    "AnthropicClient",
    "GeminiClient",
    "GroqClient",
    "ModelClient",
    "OpenAIClient",
    "available_providers",
    "create_client",
    "split_tags",
]


def create_client(provider: str, config: IndigoConfig) -> ModelClient:
    """Build the client for a provider identifier. No network I/O happens here."""
    key = provider.lower()
    cls = CLIENTS.get(key)
    if cls is None:
        raise ConfigurationError(f"Unknown provider: {provider}")

    api_key = config.credentials.for_provider(key)
    if not api_key:
        raise ConfigurationError(
            f"Missing credential for provider '{key}' (set {CREDENTIAL_ENV[key]})",
            details={"provider": key},
        )

    kwargs: dict = {"api_key": api_key, "timeout": config.provider.timeout}
    # A model override only applies to the configured default provider
    if config.provider.model and config.provider.name.lower() == key:
        kwargs["model"] = config.provider.model

    client = cls(**kwargs)
    logger.debug("Created %s client (model=%s)", key, client.model)
    return client


def available_providers(config: IndigoConfig) -> list[str]:
    """Providers with a credential configured, in preference order."""
    return [name for name in CLIENTS if config.credentials.for_provider(name)]
