"""
Paginators for page-number, offset and cursor APIs.
"""

from .paginator import RequestPaginator
from .paged import PagedPaginator
from .offset import OffsetPaginator
from .cursor import CursorPaginator

__all__ = [
    "RequestPaginator",
    "PagedPaginator",
    "OffsetPaginator",
    "CursorPaginator",
]
