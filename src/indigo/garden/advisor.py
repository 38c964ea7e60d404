"""Advisory engine: context assembly, journaling and periodic review.

A ``GardenAdvisor`` is bound to one ``GardenMemory`` and one model client for
the duration of a request. It mutates the record in place and never
persists it; saving is the caller's job.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from indigo.garden.models import GardenMemory, LogEntry, ReviewRecord

if TYPE_CHECKING:
    from indigo.clients.base import ModelClient

logger = logging.getLogger(__name__)

RECENT_LOG_WINDOW = 5
RECENT_REVIEW_WINDOW = 2
CONTEXT_WARN_THRESHOLD = 6000

IMAGE_ANALYSIS_PREFIX = "[IMAGE ANALYSIS]"
IMAGE_ANALYSIS_TAGS = ("image-analysis", "visual-inspection")

CONTEXT_TEMPLATE = """\
You are Indigo, a gardening assistant for the garden "{name}".

CORE PRINCIPLES:
{principles}

LOCATION/ZONE:
{location} (Zone {zone})
Style: {style}

RECENT ACTIVITY:
{recent_log}

SEASONAL REVIEWS:
{recent_reviews}
"""

ADVICE_TEMPLATE = "{context}\n\nUser Question: {question}\n\nIndigo's Advice:"

REVIEW_TEMPLATE = (
    'Summarize these gardening logs for the period "{period}" into a concise summary '
    "and list 3 key lessons learned.\n\nLogs:\n{logs}"
)


def utc_today() -> str:
    """Journal dates are calendar days in UTC."""
    return datetime.now(timezone.utc).date().isoformat()


class GardenAdvisor:
    """Stateless operator over a single garden record."""

    def __init__(self, memory: GardenMemory, client: ModelClient) -> None:
        self.memory = memory
        self.client = client

    async def append_log_entry(self, text: str) -> LogEntry:
        """Tag a free-text entry with the model and append it to the log."""
        today = utc_today()
        # Entry is only built once tags came back, so a failure appends nothing
        tags = await self.client.generate_tags(text)
        entry = LogEntry(date=today, entry=text, tags=tags)
        self.memory.log.append(entry)
        logger.debug("Garden %s: logged entry with tags %s", self.memory.name, tags)
        return entry

    def append_image_analysis(self, analysis: str, description: str | None = None) -> LogEntry:
        """Record an image analysis performed elsewhere. No model call."""
        if description:
            text = f"{IMAGE_ANALYSIS_PREFIX} {description}: {analysis}"
        else:
            text = f"{IMAGE_ANALYSIS_PREFIX} {analysis}"
        entry = LogEntry(date=utc_today(), entry=text, tags=list(IMAGE_ANALYSIS_TAGS))
        self.memory.log.append(entry)
        return entry

    def build_context(self) -> str:
        """Anchor block, last 5 log entries (oldest first), last 2 reviews (latest last)."""
        anchor = self.memory.anchor
        recent_log = self.memory.log[-RECENT_LOG_WINDOW:]
        recent_reviews = self.memory.review[-RECENT_REVIEW_WINDOW:]
        return CONTEXT_TEMPLATE.format(
            name=self.memory.name,
            principles="\n".join(anchor.principles),
            location=anchor.location,
            zone=anchor.zone,
            style=anchor.style,
            recent_log="\n".join(f"- [{e.date}] {e.entry}" for e in recent_log),
            recent_reviews="\n".join(f"[{r.period}]: {r.summary}" for r in recent_reviews),
        )

    async def ask_advice(self, question: str) -> str:
        """Ask the model a question in the context of this garden. Read-only."""
        context = self.build_context()
        if len(context) > CONTEXT_WARN_THRESHOLD:
            logger.warning(
                "Garden %s: advice context is %d chars (threshold: %d)",
                self.memory.name,
                len(context),
                CONTEXT_WARN_THRESHOLD,
            )
        prompt = ADVICE_TEMPLATE.format(context=context, question=question)
        return await self.client.complete(prompt)

    async def seasonal_review(self, period: str) -> ReviewRecord | None:
        """Summarize the whole log into a new review record.

        Returns None without calling the model when the log is empty. The
        first response line becomes the summary and the full response is
        kept as the only lesson. Log entries are never pruned.
        """
        if not self.memory.log:
            logger.info("Garden %s: nothing to review for %s", self.memory.name, period)
            return None

        logs = "\n".join(f"- {e.entry}" for e in self.memory.log)
        response = await self.client.complete(REVIEW_TEMPLATE.format(period=period, logs=logs))

        record = ReviewRecord(
            period=period,
            summary=response.split("\n")[0],
            lessons_learned=[response],
        )
        self.memory.review.append(record)
        logger.info(
            "Garden %s: review %s covers %d log entries", self.memory.name, period, len(self.memory.log)
        )
        return record
