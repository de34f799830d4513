"""
Smartify router: preview and commit structured extraction for a note.

POST /notes/smartify/preview runs extraction without persisting anything.
POST /notes/smartify runs extraction again and persists the results.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request

from models.request_context import RequestContext
from models.smartify_request import (
    SmartifyCommitResponse,
    SmartifyPreviewResponse,
    SmartifyRequest,
)
from services.errors import AlreadyProcessedError, EmptyTranscriptError, NoteNotFoundError
from services.extractors import build_extractors
from services.idempotency import ALREADY_PROCESSED_MESSAGE
from services.llm_client import LLMClient
from services.persistence import NotePersistenceGateway
from services.smartify_service import SmartifyService
from utils.context_utils import get_request_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes/smartify", tags=["smartify"])


def get_smartify_service() -> SmartifyService:
    """Build the service with an explicitly constructed LLM client."""
    llm = LLMClient()
    return SmartifyService(
        gateway=NotePersistenceGateway(),
        extractors=build_extractors(llm)
    )


def _owner_id(context: RequestContext) -> UUID:
    """The notes owner column is a uuid; any other caller identity is rejected."""
    try:
        return UUID(context.user_id)
    except ValueError:
        logger.warning(
            f"Invalid user_id format: user_id={context.user_id}, trace_id={context.trace_id}"
        )
        raise HTTPException(status_code=400, detail="Invalid user ID format")


def _already_processed(message: str = ALREADY_PROCESSED_MESSAGE) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "error": "Note already smartified",
            "message": message,
            "canSmartify": False
        }
    )


@router.post("/preview", response_model=SmartifyPreviewResponse)
async def preview_smartify(
    body: SmartifyRequest,
    request: Request,
    service: SmartifyService = Depends(get_smartify_service)
):
    """
    Extract a preview for a note without saving anything.

    Args:
        body: SmartifyRequest with noteId
        request: FastAPI Request object for identity headers
        service: Injected SmartifyService

    Returns:
        SmartifyPreviewResponse with per-category counts and items

    Raises:
        HTTPException: 404 unknown note, 400 empty transcript or invalid user,
            409 already smartified, 500 unexpected failure
    """
    context = get_request_context(request)
    user_id = _owner_id(context)
    logger.info(f"Smartify preview requested: note_id={body.note_id}, trace_id={context.trace_id}")

    try:
        preview = await service.preview(body.note_id, user_id)
    except NoteNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except EmptyTranscriptError:
        raise HTTPException(status_code=400, detail="Note has no transcript content")
    except Exception as e:
        logger.error(
            f"Smartify preview failed: note_id={body.note_id}, trace_id={context.trace_id}, "
            f"error={type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Preview extraction failed")

    if preview.already_processed:
        raise _already_processed()

    return SmartifyPreviewResponse(
        note_id=body.note_id,
        preview=preview.counts,
        items=preview.items
    )


@router.post("", response_model=SmartifyCommitResponse)
async def commit_smartify(
    body: SmartifyRequest,
    request: Request,
    service: SmartifyService = Depends(get_smartify_service)
):
    """
    Extract and persist structured records for a note.

    Partial success still returns 200; failed categories are listed in
    failedCategories.

    Raises:
        HTTPException: 404 unknown note, 400 empty transcript or invalid user,
            409 already smartified, 500 unexpected failure
    """
    context = get_request_context(request)
    user_id = _owner_id(context)
    logger.info(f"Smartify commit requested: note_id={body.note_id}, trace_id={context.trace_id}")

    try:
        result = await service.commit(body.note_id, user_id)
    except NoteNotFoundError:
        raise HTTPException(status_code=404, detail="Note not found")
    except EmptyTranscriptError:
        raise HTTPException(status_code=400, detail="Note has no transcript content")
    except AlreadyProcessedError as e:
        raise _already_processed(str(e))
    except Exception as e:
        logger.error(
            f"Smartify commit failed: note_id={body.note_id}, trace_id={context.trace_id}, "
            f"error={type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail="Smartify failed")

    return SmartifyCommitResponse(
        extracted=result.extracted,
        failed_categories=[category.value for category in result.failed_categories]
    )
