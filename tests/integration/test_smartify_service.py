"""
Integration Tests for SmartifyService

Runs preview/commit end to end through real extractors and normalizer with
a mocked LLM client and a mocked persistence gateway.
"""

import json
import pytest
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

from models.extraction_models import (
    ExtractionCategory,
    PriorityEnum,
)
from services.errors import AlreadyProcessedError, EmptyTranscriptError, NoteNotFoundError
from services.extractors import (
    ActionItemsExtractor,
    BrainDumpExtractor,
    InvestorUpdateExtractor,
    ProductIdeasExtractor,
    ProgressLogExtractor,
)
from services.smartify_service import SmartifyService, note_transcript

USER_ID = UUID("5b0f3a52-9c1e-4d4b-8f57-2f1e6c0a9d31")
# Sunday 2026-10-18, week starts Monday 2026-10-12
NOW = datetime(2026, 10, 18, 15, 30, tzinfo=timezone.utc)

EXAMPLE_TRANSCRIPT = (
    "I need to send the roadmap to Sarah by Friday, it's urgent. Also we shipped "
    "the new dashboard this week and are still blocked on design mockups for checkout."
)

EXAMPLE_RESPONSES = {
    ActionItemsExtractor: {"action_items": [{
        "task": "Send the roadmap to Sarah",
        "assignee": "Sarah",
        "deadline": "2026-10-23",
        "priority": "high",
    }]},
    InvestorUpdateExtractor: {
        "wins": [], "metrics": {}, "challenges": [], "asks": [],
        "draft_subject": "", "draft_body": "",
    },
    ProgressLogExtractor: {
        "completed": ["Shipped the new dashboard"],
        "in_progress": [],
        "blocked": ["Waiting on design mockups for checkout"],
    },
    ProductIdeasExtractor: {"ideas": []},
    BrainDumpExtractor: {"items": []},
}

EXTRACTOR_CLASSES = list(EXAMPLE_RESPONSES)


def make_note(**overrides):
    fields = dict(
        id=uuid4(),
        user_id=USER_ID,
        raw_transcript=EXAMPLE_TRANSCRIPT,
        content=None,
        formatted_content=None,
        audio_url=None,
        duration_seconds=42,
        updated_at=NOW - timedelta(hours=1),
        smartified_at=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def make_extractors(responses=None, failing=()):
    """One real extractor per category, each with its own mocked LLM."""
    responses = responses or EXAMPLE_RESPONSES
    extractors = []
    for extractor_cls in EXTRACTOR_CLASSES:
        llm = MagicMock()
        llm.timeout = 5
        if extractor_cls in failing:
            llm.complete = AsyncMock(side_effect=ConnectionError("model outage"))
        else:
            llm.complete = AsyncMock(return_value=json.dumps(responses[extractor_cls]))
        extractors.append(extractor_cls(llm, today=lambda: NOW.date()))
    return extractors


def make_gateway(note):
    gateway = MagicMock()
    gateway.get_note = AsyncMock(return_value=note)
    gateway.resolve_recording = AsyncMock(return_value=uuid4())
    gateway.insert_category = AsyncMock(side_effect=lambda category, recording_id, items: len(items))
    gateway.mark_smartified = AsyncMock()
    return gateway


def make_service(note, responses=None, failing=()):
    gateway = make_gateway(note)
    service = SmartifyService(
        gateway=gateway,
        extractors=make_extractors(responses, failing),
        clock=lambda: NOW
    )
    return service, gateway


def inserted(gateway):
    """Map category -> items passed to insert_category."""
    return {
        call.args[0]: call.args[2]
        for call in gateway.insert_category.call_args_list
    }


class TestNoteTranscript:
    """Tests for the transcript fallback chain."""

    def test_prefers_raw_transcript(self):
        note = make_note(raw_transcript="raw", content="content", formatted_content="fmt")
        assert note_transcript(note) == "raw"

    def test_falls_back_past_blanks(self):
        note = make_note(raw_transcript="  ", content=None, formatted_content="fmt")
        assert note_transcript(note) == "fmt"

    def test_none_when_all_blank(self):
        note = make_note(raw_transcript="", content=" ", formatted_content=None)
        assert note_transcript(note) is None


class TestPreview:
    """Tests for SmartifyService.preview."""

    @pytest.mark.asyncio
    async def test_example_scenario_counts(self):
        note = make_note()
        service, gateway = make_service(note)

        preview = await service.preview(note.id, USER_ID)

        assert preview.already_processed is False
        assert preview.counts.model_dump() == {
            "action_items": 1,
            "investor_updates": 0,
            "progress_logs": 1,
            "product_ideas": 0,
            "brain_dump": 0,
        }
        action = preview.items.action_items[0]
        assert action.assignee == "Sarah"
        assert action.priority == PriorityEnum.high
        assert action.deadline == date(2026, 10, 23)
        assert preview.items.progress_logs[0].completed == ["Shipped the new dashboard"]

        gateway.get_note.assert_awaited_once_with(note.id, USER_ID)
        gateway.resolve_recording.assert_not_called()
        gateway.insert_category.assert_not_called()
        gateway.mark_smartified.assert_not_called()

    @pytest.mark.asyncio
    async def test_already_processed_is_zero_preview(self):
        note = make_note(smartified_at=NOW - timedelta(minutes=10), updated_at=NOW - timedelta(hours=1))
        service, gateway = make_service(note)

        preview = await service.preview(note.id, USER_ID)

        assert preview.already_processed is True
        assert preview.counts.total == 0
        for extractor in service.extractors:
            extractor.llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_note_not_found(self):
        service, gateway = make_service(None)
        with pytest.raises(NoteNotFoundError):
            await service.preview(uuid4(), USER_ID)

    @pytest.mark.asyncio
    async def test_empty_transcript(self):
        note = make_note(raw_transcript=" ", content="", formatted_content=None)
        service, _ = make_service(note)
        with pytest.raises(EmptyTranscriptError):
            await service.preview(note.id, USER_ID)

    @pytest.mark.asyncio
    async def test_runs_all_extractors_on_same_transcript(self):
        note = make_note()
        service, _ = make_service(note)

        await service.preview(note.id, USER_ID)

        for extractor in service.extractors:
            user_prompt = extractor.llm.complete.call_args.args[1]
            assert EXAMPLE_TRANSCRIPT in user_prompt


class TestCommit:
    """Tests for SmartifyService.commit."""

    @pytest.mark.asyncio
    async def test_example_scenario_persists_non_empty_categories(self):
        note = make_note()
        service, gateway = make_service(note)

        result = await service.commit(note.id, USER_ID)

        assert result.failed_categories == []
        assert result.extracted.action_items == 1
        assert result.extracted.progress_logs == 1
        assert result.extracted.total == 2

        batches = inserted(gateway)
        assert set(batches) == {ExtractionCategory.action_items, ExtractionCategory.progress_logs}
        assert batches[ExtractionCategory.progress_logs][0].week_of == date(2026, 10, 12)

        gateway.resolve_recording.assert_awaited_once_with(note, EXAMPLE_TRANSCRIPT)
        gateway.mark_smartified.assert_awaited_once_with(note.id, USER_ID, NOW)

    @pytest.mark.asyncio
    async def test_nothing_found_persists_nothing_but_marks(self):
        empty = {
            ActionItemsExtractor: {"action_items": []},
            InvestorUpdateExtractor: {"wins": [], "metrics": {}, "challenges": [], "asks": []},
            ProgressLogExtractor: {"completed": [], "in_progress": [], "blocked": []},
            ProductIdeasExtractor: {"ideas": []},
            BrainDumpExtractor: {"items": []},
        }
        note = make_note(raw_transcript="Just testing the microphone.")
        service, gateway = make_service(note, responses=empty)

        result = await service.commit(note.id, USER_ID)

        assert result.extracted.total == 0
        assert result.failed_categories == []
        gateway.resolve_recording.assert_not_called()
        gateway.insert_category.assert_not_called()
        gateway.mark_smartified.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_one_extractor_outage_does_not_block_others(self):
        note = make_note()
        service, gateway = make_service(note, failing=(ActionItemsExtractor,))

        result = await service.commit(note.id, USER_ID)

        assert result.extracted.action_items == 0
        assert result.extracted.progress_logs == 1
        assert result.failed_categories == []
        assert set(inserted(gateway)) == {ExtractionCategory.progress_logs}

    @pytest.mark.asyncio
    async def test_extractor_raising_unexpectedly_degrades_category(self):
        note = make_note()
        service, gateway = make_service(note)
        service.extractors[2].extract = AsyncMock(side_effect=RuntimeError("bug"))

        result = await service.commit(note.id, USER_ID)

        assert result.extracted.progress_logs == 0
        assert result.extracted.action_items == 1

    @pytest.mark.asyncio
    async def test_partial_persistence_failure(self):
        note = make_note()
        service, gateway = make_service(note)

        async def insert(category, recording_id, items):
            if category == ExtractionCategory.action_items:
                raise RuntimeError("insert failed")
            return len(items)

        gateway.insert_category.side_effect = insert

        result = await service.commit(note.id, USER_ID)

        assert result.failed_categories == [ExtractionCategory.action_items]
        assert result.extracted.action_items == 0
        assert result.extracted.progress_logs == 1
        gateway.mark_smartified.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_recording_failure_fails_every_pending_category(self):
        note = make_note()
        service, gateway = make_service(note)
        gateway.resolve_recording.side_effect = RuntimeError("db down")

        result = await service.commit(note.id, USER_ID)

        assert set(result.failed_categories) == {
            ExtractionCategory.action_items,
            ExtractionCategory.progress_logs,
        }
        assert result.extracted.total == 0
        gateway.insert_category.assert_not_called()
        gateway.mark_smartified.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_already_processed_raises(self):
        note = make_note(smartified_at=NOW - timedelta(minutes=1), updated_at=NOW - timedelta(minutes=2))
        service, gateway = make_service(note)

        with pytest.raises(AlreadyProcessedError):
            await service.commit(note.id, USER_ID)

        gateway.insert_category.assert_not_called()
        gateway.mark_smartified.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_twice_then_edit(self):
        """Second commit is rejected; editing the note re-enables extraction."""
        note = make_note()
        service, gateway = make_service(note)

        async def mark(note_id, user_id, when):
            note.smartified_at = when

        gateway.mark_smartified.side_effect = mark

        await service.commit(note.id, USER_ID)
        with pytest.raises(AlreadyProcessedError):
            await service.commit(note.id, USER_ID)

        note.updated_at = NOW + timedelta(minutes=5)
        result = await service.commit(note.id, USER_ID)

        assert result.extracted.total == 2
        assert gateway.mark_smartified.await_count == 2

    @pytest.mark.asyncio
    async def test_week_of_is_monday_for_every_weekday(self):
        for offset in range(7):
            moment = datetime(2026, 10, 12, 9, 0, tzinfo=timezone.utc) + timedelta(days=offset)
            note = make_note()
            gateway = make_gateway(note)
            service = SmartifyService(gateway, make_extractors(), clock=lambda m=moment: m)

            await service.commit(note.id, USER_ID)

            entry = inserted(gateway)[ExtractionCategory.progress_logs][0]
            assert entry.week_of == date(2026, 10, 12)
            assert entry.week_of.weekday() == 0
