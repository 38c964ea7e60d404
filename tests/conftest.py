"""Shared fixtures: an in-process model client and garden records."""

from __future__ import annotations

from pathlib import Path

import pytest

from indigo.config import CredentialsConfig, IndigoConfig, ProviderConfig
from indigo.garden.models import GardenMemory, LogEntry, ReviewRecord
from indigo.garden.store import GardenStore


class StubClient:
    """Model client double. ``complete`` echoes the prompt unless a reply is set."""

    def __init__(
        self,
        reply: str | None = None,
        tags: list[str] | None = None,
        analysis: str = "Healthy tomato plant",
        error: Exception | None = None,
    ):
        self._reply = reply
        self._tags = tags if tags is not None else ["tomato", "planting"]
        self._analysis = analysis
        self._error = error
        self.prompts: list[str] = []
        self.image_calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "stub"

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return prompt if self._reply is None else self._reply

    async def generate_tags(self, text: str) -> list[str]:
        if self._error:
            raise self._error
        return list(self._tags)

    async def analyze_image(self, image_b64: str, prompt: str) -> str:
        self.image_calls.append((image_b64, prompt))
        if self._error:
            raise self._error
        return self._analysis


def make_memory(name: str = "Backyard", log_count: int = 0, review_count: int = 0) -> GardenMemory:
    memory = GardenMemory.new(
        name,
        principles=["Feed the soil", "No synthetic pesticides"],
        location="Portland, OR",
        zone="8b",
        style="permaculture",
    )
    memory.log = [
        LogEntry(date=f"2024-05-{i:02d}", entry=f"entry-{i:02d}", tags=["t"])
        for i in range(1, log_count + 1)
    ]
    memory.review = [
        ReviewRecord(period=f"period-{i}", summary=f"summary-{i}", lessons_learned=[f"lesson-{i}"])
        for i in range(1, review_count + 1)
    ]
    return memory


@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()


@pytest.fixture
def store(tmp_path: Path) -> GardenStore:
    return GardenStore(tmp_path / "gardens")


@pytest.fixture
def config(tmp_path: Path) -> IndigoConfig:
    return IndigoConfig(
        provider=ProviderConfig(name="openai", timeout=5),
        credentials=CredentialsConfig(
            openai_api_key="sk-test",
            anthropic_api_key="sk-ant-test",
            gemini_api_key="g-test",
            groq_api_key="gsk-test",
        ),
        gardens_dir=tmp_path / "gardens",
    )
