"""
Page-number paginator.
"""

from typing import Any, Callable, Optional

from .paginator import RequestPaginator


class PagedPaginator(RequestPaginator):
    """
    Paginates with a page number query parameter (``?page=1``, ``?page=2``, ...).

    The last page is detected, in order of preference, by
    ``has_next_resolver``, by ``total_pages_resolver``, or by a page with
    fewer than ``per_page`` items (or no items at all). When the total is
    known the paginator can prefetch every page concurrently.

    Example:
        >>> paginator = PagedPaginator(
        ...     connector, ListUsers(), per_page=50,
        ...     total_pages_resolver=lambda response: response.json("meta.last_page"),
        ... )
        >>> for response in paginator:
        ...     handle(response.json("data"))
    """

    resolver_attributes = ("total_pages_resolver", "has_next_resolver")

    def __init__(
        self,
        connector,
        original_request,
        limit: Optional[int] = None,
        per_page: Optional[int] = None,
        page_param: str = "page",
        per_page_param: str = "per_page",
        start_page: int = 1,
        total_pages_resolver: Optional[Callable[[Any], Optional[int]]] = None,
        has_next_resolver: Optional[Callable[[Any], bool]] = None,
        items_key: str = "data",
    ):
        super().__init__(connector, original_request, limit)
        self.per_page = per_page
        self.page_param = page_param
        self.per_page_param = per_page_param
        self.start_page = start_page
        self.total_pages_resolver = total_pages_resolver
        self.has_next_resolver = has_next_resolver
        self.items_key = items_key

    def page_number(self, index: int) -> int:
        return self.start_page + index

    def next_request(self, index: int, previous_response):
        request = self.original_request.clone()
        request.query.add(self.page_param, self.page_number(index))
        if self.per_page is not None:
            request.query.add(self.per_page_param, self.per_page)
        return request

    def total_pages(self, response) -> Optional[int]:
        if self.total_pages_resolver is None:
            return None
        total = self.total_pages_resolver(response)
        return int(total) if total is not None else None

    def is_last_page(self, response, index: int) -> bool:
        if self.has_next_resolver is not None:
            return not self.has_next_resolver(response)

        total = self.total_pages(response)
        if total is not None:
            return index + 1 >= total

        items = self.get_page_items(response)
        if not items:
            return True
        return self.per_page is not None and len(items) < self.per_page
