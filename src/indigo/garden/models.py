"""Garden memory record: anchor facts, chronological log, periodic reviews."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any


@dataclass
class Anchor:
    """Facts that frame every advice request for a garden."""

    principles: list[str] = field(default_factory=list)
    location: str = ""
    zone: str = ""
    style: str = ""


@dataclass
class LogEntry:
    """One dated journal record with derived tags."""

    date: str
    entry: str
    tags: list[str] = field(default_factory=list)


@dataclass
class ReviewRecord:
    """Summary of the log produced by a periodic review."""

    period: str
    summary: str
    lessons_learned: list[str] = field(default_factory=list)


@dataclass
class GardenMemory:
    """Everything Indigo remembers about one garden.

    ``log`` and ``review`` are append-only; list order is append order.
    """

    name: str
    anchor: Anchor = field(default_factory=Anchor)
    log: list[LogEntry] = field(default_factory=list)
    review: list[ReviewRecord] = field(default_factory=list)

    @classmethod
    def new(
        cls,
        name: str,
        *,
        principles: list[str] | None = None,
        location: str = "",
        zone: str = "",
        style: str = "",
    ) -> GardenMemory:
        return cls(
            name=name,
            anchor=Anchor(
                principles=list(principles or []),
                location=location,
                zone=zone,
                style=style,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GardenMemory:
        anchor = data.get("anchor") or {}
        return cls(
            name=str(data.get("name", "")),
            anchor=Anchor(
                principles=[str(p) for p in anchor.get("principles") or []],
                location=_text(anchor.get("location")),
                zone=_text(anchor.get("zone")),
                style=_text(anchor.get("style")),
            ),
            log=[
                LogEntry(
                    date=_text(item.get("date")),
                    entry=_text(item.get("entry")),
                    tags=[str(t) for t in item.get("tags") or []],
                )
                for item in data.get("log") or []
            ],
            review=[
                ReviewRecord(
                    period=_text(item.get("period")),
                    summary=_text(item.get("summary")),
                    lessons_learned=[str(x) for x in item.get("lessons_learned") or []],
                )
                for item in data.get("review") or []
            ],
        )


def _text(value: Any) -> str:
    """Coerce a loaded scalar to text. YAML turns bare dates and zones into non-strings."""
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
