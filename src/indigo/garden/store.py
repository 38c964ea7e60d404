"""YAML file store: one ``{name}.yaml`` per garden.

Read failures are treated as "garden does not exist"; write failures raise
``StorageError``. There is no cross-process locking.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

import yaml

from indigo.errors import StorageError
from indigo.garden.models import GardenMemory

logger = logging.getLogger(__name__)

_SUFFIX = ".yaml"
_INVALID_NAME = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def valid_name(name: str) -> bool:
    """Reject names that cannot be a single file inside the store root."""
    if not isinstance(name, str):
        return False
    return bool(name.strip()) and name not in (".", "..") and not _INVALID_NAME.search(name)


class GardenStore:
    """Load, save and list garden records under a directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, name: str) -> Path:
        return self.root / f"{name}{_SUFFIX}"

    def load(self, name: str) -> GardenMemory | None:
        """Return the stored record, or None if absent or unreadable."""
        if not valid_name(name):
            return None
        path = self._path(name)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            logger.debug("Garden %s not loadable from %s: %s", name, path, e)
            return None
        if not isinstance(data, dict):
            logger.debug("Garden %s at %s is not a mapping", name, path)
            return None
        try:
            memory = GardenMemory.from_dict(data)
        except (AttributeError, TypeError, ValueError) as e:
            logger.debug("Garden %s at %s has an unexpected shape: %s", name, path, e)
            return None
        if not memory.name:
            memory.name = name
        return memory

    def save(self, name: str, memory: GardenMemory) -> None:
        """Write the record atomically. Raises StorageError on I/O failure."""
        if not valid_name(name):
            raise ValueError(f"Invalid garden name: {name!r}")

        text = yaml.safe_dump(memory.to_dict(), sort_keys=False, allow_unicode=True)
        path = self._path(name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{name}-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(text)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to save garden %s to %s: %s", name, path, e)
            raise StorageError(f"Failed to save garden '{name}': {e}") from e

        logger.info("Saved garden %s (%d log entries, %d reviews)", name, len(memory.log), len(memory.review))
        if os.getenv("VERCEL"):
            logger.warning(
                "Writing to local filesystem on Vercel. This data is ephemeral and will be lost on redeploy."
            )

    def list(self) -> list[str]:
        """Sorted names of every stored garden."""
        if not self.root.is_dir():
            return []
        return sorted(p.stem for p in self.root.glob(f"*{_SUFFIX}"))

    def exists(self, name: str) -> bool:
        return valid_name(name) and self._path(name).is_file()
