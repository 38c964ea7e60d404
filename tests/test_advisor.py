"""Tests for the advisory engine: context window, journaling, reviews."""

from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from indigo.errors import ProviderError
from indigo.garden import advisor as advisor_module
from indigo.garden.advisor import IMAGE_ANALYSIS_TAGS, GardenAdvisor, utc_today
from indigo.garden.models import GardenMemory

from conftest import StubClient, make_memory


def _log_entries_in(text: str) -> list[str]:
    return re.findall(r"entry-\d\d", text)


class _LateEveningUTC(datetime):
    """23:30 UTC on 1 June, which is already 2 June east of Greenwich."""

    @classmethod
    def now(cls, tz=None):
        return datetime(2024, 6, 1, 23, 30, tzinfo=timezone.utc).astimezone(tz)


class TestAppendLogEntry:
    @pytest.mark.asyncio
    async def test_appends_tagged_entry(self):
        memory = GardenMemory(name="Backyard")
        advisor = GardenAdvisor(memory, StubClient(tags=["tomato", "planting"]))

        entry = await advisor.append_log_entry("Planted tomatoes")

        assert len(memory.log) == 1
        assert memory.log[0] is entry
        assert entry.entry == "Planted tomatoes"
        assert entry.tags == ["tomato", "planting"]
        assert entry.date == utc_today()

    @pytest.mark.asyncio
    async def test_appends_at_end(self):
        memory = make_memory(log_count=3)
        await GardenAdvisor(memory, StubClient()).append_log_entry("newest")
        assert [e.entry for e in memory.log] == ["entry-01", "entry-02", "entry-03", "newest"]

    @pytest.mark.asyncio
    async def test_empty_tags_accepted(self):
        memory = make_memory()
        await GardenAdvisor(memory, StubClient(tags=[])).append_log_entry("quiet day")
        assert memory.log[0].tags == []

    @pytest.mark.asyncio
    async def test_tag_failure_appends_nothing(self):
        memory = make_memory(log_count=2)
        advisor = GardenAdvisor(memory, StubClient(error=ProviderError("down", provider="stub")))

        with pytest.raises(ProviderError):
            await advisor.append_log_entry("Planted tomatoes")
        assert len(memory.log) == 2

    @pytest.mark.asyncio
    async def test_dated_in_utc(self, monkeypatch):
        monkeypatch.setattr(advisor_module, "datetime", _LateEveningUTC)
        memory = make_memory()

        entry = await GardenAdvisor(memory, StubClient()).append_log_entry("Late watering")

        assert entry.date == "2024-06-01"


class TestAppendImageAnalysis:
    def test_with_description(self):
        memory = make_memory()
        entry = GardenAdvisor(memory, StubClient()).append_image_analysis(
            "Early blight on lower leaves", "Tomato bed"
        )
        assert entry.entry == "[IMAGE ANALYSIS] Tomato bed: Early blight on lower leaves"
        assert memory.log == [entry]

    def test_without_description(self):
        entry = GardenAdvisor(make_memory(), StubClient()).append_image_analysis("Looks fine")
        assert entry.entry == "[IMAGE ANALYSIS] Looks fine"

    @pytest.mark.parametrize("analysis", ["", "tomato, pepper", "Image analysis not supported"])
    def test_fixed_tags(self, analysis: str):
        entry = GardenAdvisor(make_memory(), StubClient()).append_image_analysis(analysis)
        assert entry.tags == ["image-analysis", "visual-inspection"]
        assert entry.tags == list(IMAGE_ANALYSIS_TAGS)

    def test_no_model_call(self):
        client = StubClient()
        GardenAdvisor(make_memory(), client).append_image_analysis("ok")
        assert client.prompts == []
        assert client.image_calls == []

    def test_dated_in_utc(self, monkeypatch):
        monkeypatch.setattr(advisor_module, "datetime", _LateEveningUTC)
        entry = GardenAdvisor(make_memory(), StubClient()).append_image_analysis("ok")
        assert entry.date == "2024-06-01"


class TestAskAdvice:
    @pytest.mark.asyncio
    async def test_last_five_of_seven(self):
        memory = make_memory(log_count=7)
        answer = await GardenAdvisor(memory, StubClient()).ask_advice("Any pests?")

        assert _log_entries_in(answer) == ["entry-03", "entry-04", "entry-05", "entry-06", "entry-07"]
        assert "entry-01" not in answer
        assert "entry-02" not in answer

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 1, 4, 5])
    async def test_short_log_fully_included(self, count: int):
        memory = make_memory(log_count=count)
        answer = await GardenAdvisor(memory, StubClient()).ask_advice("?")
        assert _log_entries_in(answer) == [f"entry-{i:02d}" for i in range(1, count + 1)]

    @pytest.mark.asyncio
    async def test_last_two_reviews(self):
        memory = make_memory(log_count=1, review_count=4)
        answer = await GardenAdvisor(memory, StubClient()).ask_advice("?")

        assert re.findall(r"summary-\d", answer) == ["summary-3", "summary-4"]
        assert "[period-3]: summary-3" in answer

    @pytest.mark.asyncio
    async def test_single_review(self):
        memory = make_memory(review_count=1)
        answer = await GardenAdvisor(memory, StubClient()).ask_advice("?")
        assert re.findall(r"summary-\d", answer) == ["summary-1"]

    @pytest.mark.asyncio
    async def test_prompt_shape(self):
        memory = make_memory(log_count=1)
        client = StubClient(reply="Mulch heavily.")
        answer = await GardenAdvisor(memory, client).ask_advice("Any pests?")

        assert answer == "Mulch heavily."
        prompt = client.prompts[0]
        assert 'garden "Backyard"' in prompt
        assert "Feed the soil\nNo synthetic pesticides" in prompt
        assert "Portland, OR (Zone 8b)" in prompt
        assert "Style: permaculture" in prompt
        assert "- [2024-05-01] entry-01" in prompt
        assert prompt.endswith("User Question: Any pests?\n\nIndigo's Advice:")

    @pytest.mark.asyncio
    async def test_does_not_mutate(self):
        memory = make_memory(log_count=6, review_count=3)
        before = memory.to_dict()
        await GardenAdvisor(memory, StubClient()).ask_advice("?")
        assert memory.to_dict() == before

    @pytest.mark.asyncio
    async def test_failure_propagates(self):
        memory = make_memory(log_count=2)
        before = memory.to_dict()
        advisor = GardenAdvisor(memory, StubClient(error=ProviderError("boom", provider="stub")))
        with pytest.raises(ProviderError, match="boom"):
            await advisor.ask_advice("?")
        assert memory.to_dict() == before

    def test_context_is_deterministic(self):
        advisor = GardenAdvisor(make_memory(log_count=8, review_count=3), StubClient())
        assert advisor.build_context() == advisor.build_context()

    @pytest.mark.asyncio
    async def test_large_context_warns(self, caplog):
        memory = make_memory()
        memory.anchor.principles = ["x" * 7000]
        await GardenAdvisor(memory, StubClient()).ask_advice("?")
        assert "advice context" in caplog.text


class TestSeasonalReview:
    @pytest.mark.asyncio
    async def test_empty_log_is_noop(self):
        memory = make_memory(review_count=1)
        client = StubClient()
        result = await GardenAdvisor(memory, client).seasonal_review("Spring 2024")

        assert result is None
        assert len(memory.review) == 1
        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_appends_one_record(self):
        memory = make_memory(log_count=3, review_count=2)
        reply = "Good spring overall.\n1. Water early\n2. Mulch\n3. Rotate crops"
        record = await GardenAdvisor(memory, StubClient(reply=reply)).seasonal_review("Spring 2024")

        assert len(memory.review) == 3
        assert memory.review[-1] is record
        assert record.period == "Spring 2024"
        assert record.summary == "Good spring overall."
        assert record.lessons_learned == [reply]

    @pytest.mark.asyncio
    async def test_covers_entire_log_and_keeps_it(self):
        memory = make_memory(log_count=9, review_count=1)
        client = StubClient(reply="summary")
        await GardenAdvisor(memory, client).seasonal_review("Summer")

        prompt = client.prompts[0]
        assert 'for the period "Summer"' in prompt
        assert _log_entries_in(prompt) == [f"entry-{i:02d}" for i in range(1, 10)]
        assert "- entry-01\n- entry-02" in prompt
        assert len(memory.log) == 9

    @pytest.mark.asyncio
    async def test_repeated_reviews_reprocess_log(self):
        memory = make_memory(log_count=2)
        client = StubClient(reply="again")
        advisor = GardenAdvisor(memory, client)
        await advisor.seasonal_review("A")
        await advisor.seasonal_review("B")

        assert [r.period for r in memory.review] == ["A", "B"]
        assert _log_entries_in(client.prompts[1]) == ["entry-01", "entry-02"]

    @pytest.mark.asyncio
    async def test_empty_response(self):
        memory = make_memory(log_count=1)
        record = await GardenAdvisor(memory, StubClient(reply="")).seasonal_review("Fall")
        assert record.summary == ""
        assert record.lessons_learned == [""]

    @pytest.mark.asyncio
    async def test_failure_leaves_reviews_untouched(self):
        memory = make_memory(log_count=2, review_count=1)
        advisor = GardenAdvisor(memory, StubClient(error=ProviderError("down", provider="stub")))
        with pytest.raises(ProviderError):
            await advisor.seasonal_review("Fall")
        assert len(memory.review) == 1
