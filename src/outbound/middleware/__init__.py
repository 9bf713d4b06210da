"""
Middleware pipeline and built-in handlers.
"""

from .pipeline import MiddlewarePipeline, Pipe
from .builtin import (
    AuthenticateRequest,
    DetermineMockResponse,
    DebugRequest,
    DebugResponse,
    AUTHENTICATE_REQUEST,
    DETERMINE_MOCK_RESPONSE,
    DEBUG_REQUEST,
    DEBUG_RESPONSE,
)

__all__ = [
    "MiddlewarePipeline",
    "Pipe",
    "AuthenticateRequest",
    "DetermineMockResponse",
    "DebugRequest",
    "DebugResponse",
    "AUTHENTICATE_REQUEST",
    "DETERMINE_MOCK_RESPONSE",
    "DEBUG_REQUEST",
    "DEBUG_RESPONSE",
]
