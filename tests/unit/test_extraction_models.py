"""
Unit Tests for extraction models

Tests the typed records, counts and API serialization aliases.
"""

import pytest
from datetime import date
from pydantic import ValidationError

from models.extraction_models import (
    ActionItem,
    ActionItemStatusEnum,
    BrainDumpEntry,
    CommitResult,
    ExtractionCategory,
    ExtractionCounts,
    ExtractionPreview,
    ExtractionResult,
    InvestorUpdateDraft,
    PriorityEnum,
    ProductIdea,
    ProgressLogEntry,
)


class TestActionItemModel:
    """Tests for the ActionItem model."""

    def test_defaults(self):
        item = ActionItem(task="Review migration plan")

        assert item.assignee is None
        assert item.deadline is None
        assert item.priority == PriorityEnum.medium
        assert item.status == ActionItemStatusEnum.open

    def test_rejects_empty_task(self):
        with pytest.raises(ValidationError):
            ActionItem(task="")

    def test_rejects_invalid_priority(self):
        with pytest.raises(ValidationError):
            ActionItem(task="x", priority="critical")


class TestSingleRecordContent:
    """has_content for the two single-record categories."""

    def test_investor_update_content(self):
        assert not InvestorUpdateDraft().has_content()
        assert not InvestorUpdateDraft(subject="Update", body="Body").has_content()
        assert InvestorUpdateDraft(metrics={"users": 10}).has_content()
        assert InvestorUpdateDraft(asks=["Intro"]).has_content()

    def test_progress_log_content(self):
        assert not ProgressLogEntry().has_content()
        assert ProgressLogEntry(blocked=["Waiting on legal"]).has_content()

    def test_investor_update_rejects_nested_metrics(self):
        with pytest.raises(ValidationError):
            InvestorUpdateDraft(metrics={"breakdown": {"us": 1}})


class TestProductIdeaAndBrainDump:
    """Tests for ProductIdea and BrainDumpEntry defaults."""

    def test_product_idea_starts_as_idea_with_no_votes(self):
        idea = ProductIdea(idea="Dark mode")
        assert idea.status == "idea"
        assert idea.votes == 0

    def test_brain_dump_participants_default_empty(self):
        entry = BrainDumpEntry(content="Should we hire a designer?")
        assert entry.participants == []


class TestExtractionResult:
    """Tests for ExtractionResult and counts."""

    def test_counts(self):
        result = ExtractionResult(
            action_items=[ActionItem(task="a"), ActionItem(task="b")],
            progress_logs=[ProgressLogEntry(completed=["x"])],
        )
        counts = result.counts()

        assert counts.action_items == 2
        assert counts.progress_logs == 1
        assert counts.investor_updates == 0
        assert counts.total == 3

    def test_items_for(self):
        result = ExtractionResult(brain_dump=[BrainDumpEntry(content="x")])
        assert len(result.items_for(ExtractionCategory.brain_dump)) == 1
        assert result.items_for(ExtractionCategory.product_ideas) == []

    def test_counts_serialize_camel_case(self):
        counts = ExtractionCounts(action_items=1, brain_dump=2)
        assert counts.model_dump(by_alias=True) == {
            "actionItems": 1,
            "investorUpdates": 0,
            "progressLogs": 0,
            "productIdeas": 0,
            "brainDump": 2,
        }

    def test_counts_accept_camel_case(self):
        counts = ExtractionCounts.model_validate({"actionItems": 3})
        assert counts.action_items == 3

    def test_preview_defaults_to_zero(self):
        preview = ExtractionPreview(already_processed=True)
        assert preview.counts.total == 0
        assert preview.items.counts().total == 0

    def test_commit_result(self):
        result = CommitResult(failed_categories=[ExtractionCategory.product_ideas])
        assert result.extracted.total == 0
        assert result.failed_categories[0].value == "product_ideas"

    def test_deadline_is_date(self):
        item = ActionItem(task="x", deadline=date(2026, 10, 16))
        assert item.model_dump()["deadline"] == date(2026, 10, 16)
