"""
Offset paginator.
"""

import math
from typing import Any, Callable, Optional

from ..core.exceptions import PaginatorError
from .paginator import RequestPaginator


class OffsetPaginator(RequestPaginator):
    """
    Paginates with offset and limit query parameters (``?offset=0&limit=100``).

    A page with fewer than ``per_page`` items is the last one, unless
    ``total_items_resolver`` gives the item count, in which case the page
    count is known up front and pages can be prefetched.
    """

    resolver_attributes = ("total_items_resolver",)

    def __init__(
        self,
        connector,
        original_request,
        per_page: int,
        limit: Optional[int] = None,
        offset_param: str = "offset",
        limit_param: str = "limit",
        total_items_resolver: Optional[Callable[[Any], Optional[int]]] = None,
        items_key: str = "data",
    ):
        if per_page is None or per_page < 1:
            raise PaginatorError(f"per_page must be at least 1, got {per_page}")

        super().__init__(connector, original_request, limit)
        self.per_page = per_page
        self.offset_param = offset_param
        self.limit_param = limit_param
        self.total_items_resolver = total_items_resolver
        self.items_key = items_key

    def offset(self, index: int) -> int:
        return index * self.per_page

    def next_request(self, index: int, previous_response):
        request = self.original_request.clone()
        request.query.add(self.offset_param, self.offset(index))
        request.query.add(self.limit_param, self.per_page)
        return request

    def total_pages(self, response) -> Optional[int]:
        if self.total_items_resolver is None:
            return None
        total_items = self.total_items_resolver(response)
        if total_items is None:
            return None
        return math.ceil(int(total_items) / self.per_page)

    def is_last_page(self, response, index: int) -> bool:
        total = self.total_pages(response)
        if total is not None:
            return index + 1 >= total
        return len(self.get_page_items(response)) < self.per_page
