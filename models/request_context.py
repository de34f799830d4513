"""
Request Context Data Model

This module defines the RequestContext dataclass holding the caller identity
and trace id for a smartify request.
"""

from dataclasses import dataclass


@dataclass
class RequestContext:
    """
    Context information extracted from request headers and environment.

    Attributes:
        user_id: Owner of the notes being smartified
        trace_id: UUID v4 for log correlation (from X-Trace-Id header or generated)
    """
    user_id: str
    trace_id: str
