"""Garden memory: record types, YAML store and the advisory engine."""

from indigo.garden.advisor import GardenAdvisor
from indigo.garden.models import Anchor, GardenMemory, LogEntry, ReviewRecord
from indigo.garden.store import GardenStore

__all__ = ["Anchor", "GardenAdvisor", "GardenMemory", "GardenStore", "LogEntry", "ReviewRecord"]
