"""Persistence gateway between the smartify pipeline and Postgres.

Each category insert runs in its own session and commits on its own, so one
failing batch never rolls back another category. The store's own
transaction semantics are otherwise taken as given.
"""
import logging
from datetime import date, datetime, time, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlmodel import select

from models.db_models import (
    ActionItemModel,
    BrainDumpModel,
    InvestorUpdateModel,
    NoteModel,
    ProductIdeaModel,
    ProgressLogModel,
    RecordingModel,
)
from models.extraction_models import (
    ActionItem,
    BrainDumpEntry,
    ExtractionCategory,
    InvestorUpdateDraft,
    ProductIdea,
    ProgressLogEntry,
)
from services.database import get_async_session

logger = logging.getLogger(__name__)


def _deadline_timestamp(deadline: Optional[date]) -> Optional[datetime]:
    if deadline is None:
        return None
    return datetime.combine(deadline, time.min, tzinfo=timezone.utc)


class NotePersistenceGateway:
    """Reads notes, resolves recordings, and appends extraction rows."""

    async def get_note(self, note_id: UUID, user_id: UUID) -> Optional[NoteModel]:
        """Fetch a note owned by user_id, or None."""
        async with get_async_session() as session:
            result = await session.execute(
                select(NoteModel).where(
                    NoteModel.id == note_id,
                    NoteModel.user_id == user_id
                )
            )
            return result.scalar_one_or_none()

    async def resolve_recording(self, note: NoteModel, transcript: str) -> UUID:
        """
        Find the recording for a note, creating one when none exists.

        A recording with the same audio_url owned by the same user is reused;
        otherwise a completed recording row is inserted for the transcript.

        Args:
            note: The source note
            transcript: Transcript text the extraction ran on

        Returns:
            The recording id extraction rows should reference
        """
        async with get_async_session() as session:
            if note.audio_url:
                result = await session.execute(
                    select(RecordingModel).where(
                        RecordingModel.audio_url == note.audio_url,
                        RecordingModel.user_id == note.user_id
                    ).limit(1)
                )
                existing = result.scalar_one_or_none()
                if existing is not None:
                    return existing.id

            logger.info(f"Creating recording for note: note_id={note.id}")
            recording = RecordingModel(
                user_id=note.user_id,
                audio_url=note.audio_url,
                raw_transcript=transcript,
                cleaned_transcript=note.formatted_content or transcript,
                duration_seconds=note.duration_seconds or 0,
                processing_status="completed",
            )
            session.add(recording)
            await session.commit()
            return recording.id

    async def insert_category(self, category: ExtractionCategory, recording_id: UUID, items: list) -> int:
        """Dispatch a batch insert to the table for `category`."""
        inserters = {
            ExtractionCategory.action_items: self.insert_action_items,
            ExtractionCategory.investor_updates: self.insert_investor_updates,
            ExtractionCategory.progress_logs: self.insert_progress_logs,
            ExtractionCategory.product_ideas: self.insert_product_ideas,
            ExtractionCategory.brain_dump: self.insert_brain_dump,
        }
        return await inserters[category](recording_id, items)

    async def insert_action_items(self, recording_id: UUID, items: List[ActionItem]) -> int:
        rows = [
            ActionItemModel(
                recording_id=recording_id,
                task=item.task,
                assignee=item.assignee,
                deadline=_deadline_timestamp(item.deadline),
                priority=item.priority.value,
                status=item.status.value,
            )
            for item in items
        ]
        return await self._insert_batch(ExtractionCategory.action_items, rows)

    async def insert_investor_updates(self, recording_id: UUID, items: List[InvestorUpdateDraft]) -> int:
        rows = [
            InvestorUpdateModel(
                recording_id=recording_id,
                draft_subject=item.subject,
                draft_body=item.body,
                wins=item.wins,
                metrics=item.metrics,
                challenges=item.challenges,
                asks=item.asks,
                status=item.status.value,
            )
            for item in items
        ]
        return await self._insert_batch(ExtractionCategory.investor_updates, rows)

    async def insert_progress_logs(self, recording_id: UUID, items: List[ProgressLogEntry]) -> int:
        rows = []
        for item in items:
            if item.week_of is None:
                raise ValueError("Progress log entries need week_of before insert")
            rows.append(ProgressLogModel(
                recording_id=recording_id,
                week_of=item.week_of,
                completed=item.completed,
                in_progress=item.in_progress,
                blocked=item.blocked,
            ))
        return await self._insert_batch(ExtractionCategory.progress_logs, rows)

    async def insert_product_ideas(self, recording_id: UUID, items: List[ProductIdea]) -> int:
        rows = [
            ProductIdeaModel(
                recording_id=recording_id,
                idea=item.idea,
                category=item.category.value,
                priority=item.priority.value,
                context=item.context,
                status=item.status,
                votes=item.votes,
            )
            for item in items
        ]
        return await self._insert_batch(ExtractionCategory.product_ideas, rows)

    async def insert_brain_dump(self, recording_id: UUID, items: List[BrainDumpEntry]) -> int:
        rows = [
            BrainDumpModel(
                recording_id=recording_id,
                content=item.content,
                category=item.category.value,
                participants=item.participants,
            )
            for item in items
        ]
        return await self._insert_batch(ExtractionCategory.brain_dump, rows)

    async def mark_smartified(self, note_id: UUID, user_id: UUID, when: datetime) -> None:
        """Advance the note's idempotency marker."""
        async with get_async_session() as session:
            await session.execute(
                update(NoteModel)
                .where(NoteModel.id == note_id, NoteModel.user_id == user_id)
                .values(smartified_at=when)
            )
            await session.commit()
        logger.info(f"Note marked smartified: note_id={note_id}, smartified_at={when.isoformat()}")

    async def _insert_batch(self, category: ExtractionCategory, rows: list) -> int:
        if not rows:
            return 0
        async with get_async_session() as session:
            session.add_all(rows)
            await session.commit()
        logger.info(f"Persisted batch: category={category.value}, rows={len(rows)}")
        return len(rows)
