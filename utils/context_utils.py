"""
Context Extraction Utilities

This module extracts the caller identity and trace id for smartify requests.

The user_id follows a priority chain:
1. X-User-ID request header
2. MOCK_USER_ID environment variable
3. "system"
"""

import os
import uuid
import logging
from fastapi import Request
from models.request_context import RequestContext

logger = logging.getLogger(__name__)


def get_request_context(request: Request) -> RequestContext:
    """
    Extract context from request headers with fallback to environment variables.

    Args:
        request: FastAPI Request object containing headers

    Returns:
        RequestContext with user_id and trace_id populated
    """
    trace_id = _extract_trace_id(request)
    user_id = _extract_user_id(request, trace_id)

    logger.info(f"Context extracted: user_id={user_id}, trace_id={trace_id}")

    return RequestContext(user_id=user_id, trace_id=trace_id)


def _extract_user_id(request: Request, trace_id: str) -> str:
    """
    Extract user_id from request headers or environment.

    Args:
        request: FastAPI Request object
        trace_id: Current trace ID for logging

    Returns:
        User identifier string
    """
    user_id = request.headers.get("X-User-ID")
    if user_id and user_id.strip():
        logger.debug(f"User ID from header: {user_id}")
        return user_id.strip()

    user_id = os.getenv("MOCK_USER_ID")
    if user_id:
        logger.debug(f"User ID from environment: {user_id}")
        return user_id

    logger.info(f"Using default user_id: system. trace_id={trace_id}")
    return "system"


def _extract_trace_id(request: Request) -> str:
    """
    Use the X-Trace-Id header when it is a valid UUID v4, otherwise generate one.

    Args:
        request: FastAPI Request object

    Returns:
        UUID v4 string
    """
    trace_id = request.headers.get("X-Trace-Id")
    if trace_id:
        if _is_valid_uuid_v4(trace_id):
            return trace_id
        logger.warning(f"Invalid X-Trace-Id header: {trace_id}. Generating new trace_id.")
    return str(uuid.uuid4())


def _is_valid_uuid_v4(value: str) -> bool:
    """
    Validate that a string is a valid UUID v4.

    Args:
        value: String to validate

    Returns:
        True if valid UUID v4, False otherwise
    """
    try:
        parsed_uuid = uuid.UUID(value, version=4)
        return parsed_uuid.version == 4 and str(parsed_uuid) == value.lower()
    except (ValueError, AttributeError):
        return False
