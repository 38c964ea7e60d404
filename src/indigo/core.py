"""Indigo service hub, the request pipeline behind every connector.

Responsibilities:
1. Provider selection: build the model client for the request
2. Lane Queue: serialize load/mutate/save per garden name
3. Garden lookup: absent records surface as NotFoundError
4. Advisory operations: chat, image analysis, periodic review
5. Persistence: save the mutated record before answering
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from indigo.clients import ModelClient, create_client
from indigo.config import IndigoConfig
from indigo.errors import ConflictError, NotFoundError
from indigo.garden.advisor import GardenAdvisor
from indigo.garden.models import GardenMemory, ReviewRecord
from indigo.garden.store import GardenStore, valid_name

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, IndigoConfig], ModelClient]

ANALYSIS_PROMPT = """\
You are Indigo, an expert gardening AI. Analyze this plant image and provide:
1. Plant identification (if possible)
2. Health assessment (healthy, stressed, diseased, pest damage, etc.)
3. Specific observations (leaf color, spots, wilting, etc.)
4. Recommended actions (if any issues detected)

Be concise but thorough."""


class Indigo:
    """Core service. Loads a garden, runs one advisory operation, saves it."""

    def __init__(
        self,
        config: IndigoConfig,
        store: GardenStore | None = None,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.config = config
        self.store = store or GardenStore(config.gardens_dir)
        self._client_factory = client_factory
        self._lane_locks: dict[str, asyncio.Lock] = {}  # per-garden serialization

    # ── Lane Queue (per-garden serialization) ────────────────

    def _get_lane_lock(self, garden: str) -> asyncio.Lock:
        if garden not in self._lane_locks:
            self._lane_locks[garden] = asyncio.Lock()
        return self._lane_locks[garden]

    # ── Lookup ───────────────────────────────────────────────

    def list_gardens(self) -> list[str]:
        return self.store.list()

    def get_garden(self, name: str) -> GardenMemory:
        memory = self.store.load(name)
        if memory is None:
            raise NotFoundError(f"Garden not found: {name}", details={"garden": name})
        return memory

    def create_garden(
        self,
        name: str,
        *,
        principles: list[str] | None = None,
        location: str = "",
        zone: str = "",
        style: str = "",
    ) -> GardenMemory:
        if not valid_name(name):
            raise ValueError(f"Invalid garden name: {name!r}")
        if self.store.exists(name):
            raise ConflictError(f"Garden already exists: {name}", details={"garden": name})
        memory = GardenMemory.new(
            name, principles=principles, location=location, zone=zone, style=style
        )
        self.store.save(name, memory)
        logger.info("Created garden: %s", name)
        return memory

    def _client(self, provider: str | None) -> ModelClient:
        return self._client_factory(provider or self.config.provider.name, self.config)

    # ── Advisory operations ──────────────────────────────────

    async def chat(self, garden: str, message: str, provider: str | None = None) -> str:
        """Journal the message, then answer it with the updated garden as context."""
        client = self._client(provider)
        async with self._get_lane_lock(garden):
            advisor = GardenAdvisor(self.get_garden(garden), client)
            await advisor.append_log_entry(message)
            self.store.save(garden, advisor.memory)
            return await advisor.ask_advice(message)

    async def analyze(
        self,
        garden: str,
        image_b64: str,
        provider: str | None = None,
        description: str | None = None,
    ) -> str:
        """Analyze a plant photo and journal the result."""
        client = self._client(provider)
        async with self._get_lane_lock(garden):
            memory = self.get_garden(garden)
            analysis = await client.analyze_image(image_b64, ANALYSIS_PROMPT)
            advisor = GardenAdvisor(memory, client)
            advisor.append_image_analysis(analysis, description)
            self.store.save(garden, memory)
            return analysis

    async def review(
        self, garden: str, period: str, provider: str | None = None
    ) -> ReviewRecord | None:
        """Run a periodic review. Returns None when the log is empty."""
        client = self._client(provider)
        async with self._get_lane_lock(garden):
            advisor = GardenAdvisor(self.get_garden(garden), client)
            record = await advisor.seasonal_review(period)
            if record is not None:
                self.store.save(garden, advisor.memory)
            return record
