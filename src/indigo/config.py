"""Configuration loading from environment variables and indigo.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_GARDENS_DIR = Path("gardens")
_CONFIG_FILENAME = "indigo.toml"

# Provider identifier → environment variable holding its API key
CREDENTIAL_ENV = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "groq": "GROQ_API_KEY",
}


@dataclass
class ProviderConfig:
    """Default model provider and per-call limits."""

    name: str = "openai"
    model: str | None = None
    timeout: int = 120


@dataclass
class CredentialsConfig:
    """API keys for each model provider."""

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""
    groq_api_key: str = ""

    def for_provider(self, name: str) -> str:
        return getattr(self, f"{name.lower()}_api_key", "")


@dataclass
class ServerConfig:
    """HTTP API configuration."""

    host: str = "127.0.0.1"
    port: int = 3000
    static_dir: Path | None = None


@dataclass
class IndigoConfig:
    """Top-level Indigo configuration."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    gardens_dir: Path = _DEFAULT_GARDENS_DIR
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> IndigoConfig:
    """Load configuration from environment variables and optional indigo.toml.

    Priority: environment variables > indigo.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.indigo/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".indigo" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    provider_data = file_data.get("provider", {})
    credentials_data = file_data.get("credentials", {})
    server_data = file_data.get("server", {})

    static_dir = os.getenv("INDIGO_STATIC_DIR", server_data.get("static_dir"))

    credentials = CredentialsConfig(
        **{
            f"{name}_api_key": os.getenv(env, credentials_data.get(f"{name}_api_key", ""))
            for name, env in CREDENTIAL_ENV.items()
        }
    )

    config = IndigoConfig(
        provider=ProviderConfig(
            name=os.getenv("INDIGO_PROVIDER", provider_data.get("name", "openai")),
            model=os.getenv("INDIGO_MODEL", provider_data.get("model")),
            timeout=int(os.getenv("INDIGO_TIMEOUT", provider_data.get("timeout", 120))),
        ),
        credentials=credentials,
        server=ServerConfig(
            host=os.getenv("INDIGO_HOST", server_data.get("host", "127.0.0.1")),
            port=int(os.getenv("INDIGO_PORT", server_data.get("port", 3000))),
            static_dir=Path(static_dir) if static_dir else None,
        ),
        gardens_dir=Path(
            os.getenv("INDIGO_GARDENS_DIR", file_data.get("gardens_dir", str(_DEFAULT_GARDENS_DIR)))
        ),
        log_level=os.getenv("INDIGO_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
