"""
Smartify Request/Response Models

This module defines the Pydantic models for the smartify endpoints.
These models handle validation and serialization for the
POST /notes/smartify/preview and POST /notes/smartify APIs.
"""

from typing import List
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.extraction_models import ExtractionCounts, ExtractionResult


class SmartifyRequest(BaseModel):
    """
    Request body for both smartify endpoints.

    Attributes:
        note_id: Identifier of the note to extract from (sent as "noteId")
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    note_id: UUID = Field(
        ...,
        description="Identifier of the note to smartify"
    )


class SmartifyPreviewResponse(BaseModel):
    """
    Response from the preview endpoint. Nothing has been persisted.

    Attributes:
        success: Always True for a 200 response
        note_id: Identifier of the previewed note
        preview: Item counts per category
        items: The typed items that a commit would create
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    note_id: UUID
    preview: ExtractionCounts
    items: ExtractionResult


class SmartifyCommitResponse(BaseModel):
    """
    Response from the commit endpoint.

    Attributes:
        success: True for a 200 response, even on partial commit
        extracted: Persisted item counts per category
        failed_categories: Categories whose batch insert failed
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    extracted: ExtractionCounts
    failed_categories: List[str] = Field(default_factory=list)
