"""Error types for the smartify pipeline.

The router maps these onto HTTP responses; everything else propagates as a 500.
"""


class SmartifyError(Exception):
    """Base exception for smartify errors."""

    pass


class NoteNotFoundError(SmartifyError):
    """Raised when the note does not exist or belongs to another user."""

    pass


class EmptyTranscriptError(SmartifyError):
    """Raised when a note has no transcript text to extract from."""

    pass


class AlreadyProcessedError(SmartifyError):
    """Raised when a note was smartified and has not been edited since.

    This is a user-facing condition, not a system failure; callers should
    surface it rather than retry.
    """

    def __init__(self, note_id: str, reason: str | None = None) -> None:
        super().__init__(reason or f"Note {note_id} has already been smartified")
        self.note_id = note_id


class LLMResponseError(SmartifyError):
    """Raised when the language model returns no usable content."""

    pass


__all__ = [
    "AlreadyProcessedError",
    "EmptyTranscriptError",
    "LLMResponseError",
    "NoteNotFoundError",
    "SmartifyError",
]
