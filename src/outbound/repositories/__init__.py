"""
Repositories for request properties and bodies.
"""

from .stores import ArrayStore, DelayStore
from .body import (
    BodyRepository,
    ArrayBodyRepository,
    JsonBodyRepository,
    FormBodyRepository,
    StringBodyRepository,
    StreamBodyRepository,
    MultipartBodyRepository,
    MultipartValue,
)

__all__ = [
    "ArrayStore",
    "DelayStore",
    "BodyRepository",
    "ArrayBodyRepository",
    "JsonBodyRepository",
    "FormBodyRepository",
    "StringBodyRepository",
    "StreamBodyRepository",
    "MultipartBodyRepository",
    "MultipartValue",
]
