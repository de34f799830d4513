"""Data models for the smartify extraction service."""
from .extraction_models import (
    ExtractionCategory,
    PriorityEnum,
    ActionItemStatusEnum,
    InvestorUpdateStatusEnum,
    ProductIdeaCategoryEnum,
    BrainDumpCategoryEnum,
    ActionItem,
    InvestorUpdateDraft,
    ProgressLogEntry,
    ProductIdea,
    BrainDumpEntry,
    ExtractionCounts,
    ExtractionResult,
    ExtractionPreview,
    CommitResult,
)
from .db_models import (
    NoteModel,
    RecordingModel,
    ActionItemModel,
    InvestorUpdateModel,
    ProgressLogModel,
    ProductIdeaModel,
    BrainDumpModel,
)

__all__ = [
    # Extraction models
    "ExtractionCategory",
    "PriorityEnum",
    "ActionItemStatusEnum",
    "InvestorUpdateStatusEnum",
    "ProductIdeaCategoryEnum",
    "BrainDumpCategoryEnum",
    "ActionItem",
    "InvestorUpdateDraft",
    "ProgressLogEntry",
    "ProductIdea",
    "BrainDumpEntry",
    "ExtractionCounts",
    "ExtractionResult",
    "ExtractionPreview",
    "CommitResult",
    # Database models
    "NoteModel",
    "RecordingModel",
    "ActionItemModel",
    "InvestorUpdateModel",
    "ProgressLogModel",
    "ProductIdeaModel",
    "BrainDumpModel",
]
