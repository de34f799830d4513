"""Smartify Service: preview and commit structured extraction for a note.

Fans out to the five category extractors concurrently, joins on all of
them, and either reports what was found (preview) or persists it (commit).
Commit is not one transaction: each category batch commits on its own, and
the note's smartified_at marker is advanced once at the end even when some
batches failed.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from uuid import UUID

from models.extraction_models import (
    CommitResult,
    ExtractionCategory,
    ExtractionCounts,
    ExtractionPreview,
    ExtractionResult,
)
from services.errors import AlreadyProcessedError, EmptyTranscriptError, NoteNotFoundError
from services.extractors import CategoryExtractor
from services.idempotency import can_extract
from services.persistence import NotePersistenceGateway
from utils.date_utils import week_start

logger = logging.getLogger(__name__)


def note_transcript(note) -> Optional[str]:
    """First non-blank of raw_transcript, content, formatted_content."""
    for text in (note.raw_transcript, note.content, note.formatted_content):
        if text and text.strip():
            return text
    return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SmartifyService:
    """Orchestrates extraction, the idempotency guard, and persistence."""

    def __init__(
        self,
        gateway: NotePersistenceGateway,
        extractors: List[CategoryExtractor],
        clock: Callable[[], datetime] = _utcnow
    ):
        self.gateway = gateway
        self.extractors = extractors
        self._clock = clock

    async def run_extraction(self, transcript: str) -> ExtractionResult:
        """
        Run every extractor concurrently against the same transcript.

        An extractor that raises despite its own error handling degrades
        its category to zero items; the others are unaffected.

        Args:
            transcript: Transcript text

        Returns:
            ExtractionResult with normalized items per category
        """
        results = await asyncio.gather(
            *(extractor.extract(transcript) for extractor in self.extractors),
            return_exceptions=True
        )

        extracted = ExtractionResult()
        for extractor, result in zip(self.extractors, results):
            category = extractor.category.value
            if isinstance(result, BaseException):
                logger.error(
                    f"Extractor failed (non-critical): category={category}, "
                    f"error={type(result).__name__}: {str(result)}",
                    exc_info=result
                )
                continue
            setattr(extracted, category, list(result))

        logger.info(f"Extraction run complete: counts={extracted.counts().model_dump()}")
        return extracted

    async def _load(self, note_id: UUID, user_id: UUID):
        note = await self.gateway.get_note(note_id, user_id)
        if note is None:
            raise NoteNotFoundError(f"Note {note_id} not found")
        return note

    def _require_transcript(self, note) -> str:
        transcript = note_transcript(note)
        if transcript is None:
            raise EmptyTranscriptError(f"Note {note.id} has no transcript content")
        return transcript

    async def preview(self, note_id: UUID, user_id: UUID) -> ExtractionPreview:
        """
        Dry-run extraction for a note. Persists nothing.

        A note that is already smartified and unedited yields an all-zero
        preview flagged already_processed rather than an error.

        Raises:
            NoteNotFoundError: If the note does not exist for this user
            EmptyTranscriptError: If the note has no transcript text
        """
        note = await self._load(note_id, user_id)

        decision = can_extract(note)
        if not decision.allowed:
            logger.info(f"Preview skipped, already smartified: note_id={note_id}")
            return ExtractionPreview(already_processed=True)

        transcript = self._require_transcript(note)
        logger.info(f"Extracting preview: note_id={note_id}, transcript_length={len(transcript)}")

        items = await self.run_extraction(transcript)
        return ExtractionPreview(counts=items.counts(), items=items)

    async def commit(self, note_id: UUID, user_id: UUID) -> CommitResult:
        """
        Extract and persist every non-empty category, then mark the note smartified.

        Extraction is re-run rather than reused from a preview. Category
        batches are inserted concurrently; a failed batch is logged and
        reported in failed_categories while the rest still commit.

        Raises:
            NoteNotFoundError: If the note does not exist for this user
            AlreadyProcessedError: If the note was smartified and not edited since
            EmptyTranscriptError: If the note has no transcript text
        """
        note = await self._load(note_id, user_id)

        decision = can_extract(note)
        if not decision.allowed:
            logger.info(f"Commit rejected, already smartified: note_id={note_id}")
            raise AlreadyProcessedError(str(note_id), decision.reason)

        transcript = self._require_transcript(note)
        logger.info(f"Starting smartify commit: note_id={note_id}")

        items = await self.run_extraction(transcript)
        now = self._clock()
        for entry in items.progress_logs:
            entry.week_of = week_start(now.date())

        pending = [c for c in ExtractionCategory if items.items_for(c)]
        extracted = ExtractionCounts()
        failed: List[ExtractionCategory] = []

        if pending:
            try:
                recording_id = await self.gateway.resolve_recording(note, transcript)
            except Exception as e:
                logger.error(
                    f"Recording resolution failed: note_id={note_id}, error={e}",
                    exc_info=True
                )
                failed = pending
            else:
                outcomes = await asyncio.gather(
                    *(self._persist(category, recording_id, items.items_for(category))
                      for category in pending)
                )
                for category, (count, ok) in zip(pending, outcomes):
                    if ok:
                        setattr(extracted, category.value, count)
                    else:
                        failed.append(category)

        await self.gateway.mark_smartified(note.id, user_id, now)

        logger.info(
            f"Smartify commit complete: note_id={note_id}, total={extracted.total}, "
            f"extracted={extracted.model_dump()}, failed={[c.value for c in failed]}"
        )
        return CommitResult(extracted=extracted, failed_categories=failed)

    async def _persist(self, category: ExtractionCategory, recording_id: UUID, items: list) -> Tuple[int, bool]:
        try:
            count = await self.gateway.insert_category(category, recording_id, items)
            return count, True
        except Exception as e:
            logger.error(
                f"Category persistence failed: category={category.value}, "
                f"recording_id={recording_id}, error={e}",
                exc_info=True
            )
            return 0, False
