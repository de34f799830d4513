"""Idempotency guard for smartify, keyed on the note's smartified_at marker.

The check is advisory: there is no row lock, so two concurrent requests for
the same note can both pass it.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

ALREADY_PROCESSED_MESSAGE = (
    "This note has already been smartified. Edit the note to smartify again."
)


@dataclass
class GuardDecision:
    """Whether extraction may run, and why not when it may not."""
    allowed: bool
    reason: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the store are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def can_extract(note) -> GuardDecision:
    """
    Decide whether a note may be (re-)extracted.

    Allowed when smartified_at is unset, or when updated_at is strictly
    later than smartified_at (the note was edited since).

    Args:
        note: Any object with updated_at and smartified_at attributes

    Returns:
        GuardDecision with allowed=False and a user-facing reason when blocked
    """
    smartified_at = note.smartified_at
    if smartified_at is None:
        return GuardDecision(allowed=True)

    updated_at = note.updated_at
    if updated_at is not None and _as_utc(updated_at) > _as_utc(smartified_at):
        logger.debug(
            f"Note edited since last smartify: note_id={note.id}, "
            f"updated_at={updated_at}, smartified_at={smartified_at}"
        )
        return GuardDecision(allowed=True)

    return GuardDecision(allowed=False, reason=ALREADY_PROCESSED_MESSAGE)
