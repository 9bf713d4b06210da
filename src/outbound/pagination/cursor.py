"""
Cursor paginator.
"""

import logging
from typing import Any, Callable, Optional, Set

from .paginator import RequestPaginator


logger = logging.getLogger(__name__)


class CursorPaginator(RequestPaginator):
    """
    Paginates by passing the cursor returned with each page (``?cursor=abc``).

    Pages are always fetched one after another, since each request needs
    the previous response. Iteration stops when no cursor is returned or a
    cursor repeats.
    """

    resolver_attributes = ("next_cursor_resolver",)

    def __init__(
        self,
        connector,
        original_request,
        limit: Optional[int] = None,
        cursor_param: str = "cursor",
        next_cursor_resolver: Optional[Callable[[Any], Optional[str]]] = None,
        cursor_key: str = "next_cursor",
        items_key: str = "data",
    ):
        super().__init__(connector, original_request, limit)
        self.cursor_param = cursor_param
        self.next_cursor_resolver = next_cursor_resolver
        self.cursor_key = cursor_key
        self.items_key = items_key
        self._seen_cursors: Set[str] = set()

    def next_cursor(self, response) -> Optional[str]:
        if self.next_cursor_resolver is not None:
            return self.next_cursor_resolver(response)
        return response.json(self.cursor_key)

    def next_request(self, index: int, previous_response):
        request = self.original_request.clone()
        if previous_response is not None:
            cursor = self.next_cursor(previous_response)
            self._seen_cursors.add(cursor)
            request.query.add(self.cursor_param, cursor)
        return request

    def is_last_page(self, response, index: int) -> bool:
        cursor = self.next_cursor(response)
        if not cursor:
            return True
        if cursor in self._seen_cursors:
            logger.warning(f"Cursor {cursor!r} repeated; stopping pagination")
            return True
        return False

    def reset_state(self) -> None:
        self._seen_cursors = set()
