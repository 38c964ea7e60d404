"""Local CLI REPL connector for chatting with one garden from the terminal."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from indigo.errors import IndigoError, NotFoundError

if TYPE_CHECKING:
    from indigo.core import Indigo

logger = logging.getLogger(__name__)


class CLIConnector:
    """Interactive REPL connector reading stdin and writing stdout."""

    def __init__(self, indigo: Indigo, garden: str, provider: str | None = None) -> None:
        self._indigo = indigo
        self._garden = garden
        self._provider = provider
        self._running = False

    @property
    def name(self) -> str:
        return "cli"

    async def start(self) -> None:
        # Fail before the prompt if the garden does not exist
        self._indigo.get_garden(self._garden)

        self._running = True
        loop = asyncio.get_running_loop()

        print(f"Indigo: garden '{self._garden}' (type 'exit' or Ctrl+C to quit)")
        print("-" * 48)

        while self._running:
            try:
                line = await loop.run_in_executor(None, self._read_input)
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                break

            if line is None or line.strip().lower() in ("exit", "quit"):
                print("Bye!")
                break

            text = line.strip()
            if not text:
                continue

            try:
                response = await self._indigo.chat(self._garden, text, self._provider)
            except NotFoundError:
                raise
            except IndigoError as e:
                logger.error("Chat failed: %s", e.message)
                print(f"\n[error] {e.message}", file=sys.stderr)
                continue
            self.reply(response)

    def _read_input(self) -> str | None:
        try:
            sys.stdout.write("\nYou: ")
            sys.stdout.flush()
            raw = sys.stdin.buffer.readline()
            if not raw:
                return None
            return raw.decode("utf-8", errors="replace").rstrip("\n")
        except EOFError:
            return None

    async def stop(self) -> None:
        self._running = False

    def reply(self, text: str) -> None:
        print(f"\nIndigo: {text}")
