"""
Base class for request paginators.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..core.exceptions import PaginatorError


logger = logging.getLogger(__name__)


class RequestPaginator(ABC):
    """
    Restartable iterator over the pages of a request.

    Each page is a clone of the original request with variant-specific
    query parameters, resolved and sent through the connector like any
    other request.

    Iterating yields Responses, or Futures when the paginator is
    asynchronous. A loop stops when the variant reports the last page or
    ``limit`` pages have been fetched in that loop.

    With ``continue_on_new_loop`` (the default) a new loop resumes after
    the last page fetched by the previous one. Set it to False to restart
    from the first page on every loop.

    Resolver callbacks are not serialised; a paginator restored from a
    pickle falls back to the default resolvers.

    Attributes:
        connector: Connector used to send every page
        original_request: Request template for the first page
        limit: Maximum pages fetched per loop (None = no limit)
        continue_on_new_loop: Resume instead of restarting on a new loop
        items_key: Dotted JSON key holding the page items
    """

    continue_on_new_loop: bool = True
    items_key: str = "data"
    resolver_attributes: tuple = ()

    def __init__(self, connector, original_request, limit: Optional[int] = None):
        if limit is not None and limit < 1:
            raise PaginatorError(f"limit must be at least 1, got {limit}")

        self.connector = connector
        self.original_request = original_request
        self.limit = limit
        self._asynchronous = False
        self._last_response = None
        self._last_index = -1
        self._count_response = None
        self._lock = threading.Lock()

    # =========================================================================
    # Variant hooks
    # =========================================================================

    @abstractmethod
    def next_request(self, index: int, previous_response):
        """
        Build the request for a page.

        Args:
            index: Zero-based page index
            previous_response: Response of page ``index - 1`` (None for the first page)
        """
        pass

    @abstractmethod
    def is_last_page(self, response, index: int) -> bool:
        """Whether the page at ``index`` is the final one."""
        pass

    def total_pages(self, response) -> Optional[int]:
        """Total page count read from a response, or None if unknown."""
        return None

    def reset_state(self) -> None:
        """Clear variant state when a loop restarts from the first page."""
        pass

    def get_page_items(self, response) -> List[Any]:
        items = response.json(self.items_key, [])
        return items if isinstance(items, list) else []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def last_response(self):
        return self._last_response

    @property
    def current_index(self) -> int:
        """Index of the furthest page fetched so far (-1 before the first)."""
        return self._last_index

    def set_async(self, asynchronous: bool = True) -> "RequestPaginator":
        self._asynchronous = asynchronous
        return self

    def is_async(self) -> bool:
        return self._asynchronous

    def rewind(self) -> None:
        """Prepare a new loop; only clears state when not continuing."""
        if self.continue_on_new_loop:
            return
        with self._lock:
            self._last_response = None
            self._last_index = -1
            self._count_response = None
        self.reset_state()

    def _record_response(self, index: int, response) -> None:
        with self._lock:
            if index >= self._last_index:
                self._last_index = index
                self._last_response = response

    def _sequence_exhausted(self) -> bool:
        return self._last_response is not None and self.is_last_page(self._last_response, self._last_index)

    # =========================================================================
    # Iteration
    # =========================================================================

    def __iter__(self) -> Iterator[Any]:
        self.rewind()
        if self._asynchronous:
            return self._iterate_async()
        return self._iterate_sync()

    def _iterate_sync(self) -> Iterator[Any]:
        fetched = 0
        while not self._limit_reached(fetched) and not self._sequence_exhausted():
            index = self._last_index + 1
            request = self.next_request(index, self._last_response)

            logger.debug(f"Fetching page {index} of {type(self.original_request).__name__}")
            response = self.connector.send(request)

            self._record_response(index, response)
            fetched += 1
            yield response

    def _iterate_async(self) -> Iterator[Future]:
        fetched = 0
        while not self._limit_reached(fetched) and not self._sequence_exhausted():
            index = self._last_index + 1
            future = self._send_page_async(index, self.next_request(index, self._last_response))
            fetched += 1
            yield future

            try:
                response = future.result()
            except Exception:
                # Already reported through the future.
                return
            self._record_response(index, response)

            total = self.total_pages(response)
            if total is None:
                continue

            last_index = total - 1
            if self.limit is not None:
                last_index = min(last_index, index + self.limit - fetched)

            for next_index in range(index + 1, last_index + 1):
                fetched += 1
                yield self._send_page_async(next_index, self.next_request(next_index, response))
            return

    def _send_page_async(self, index: int, request) -> Future:
        future = self.connector.send_async(request)

        def _on_done(done: Future) -> None:
            if not done.cancelled() and done.exception() is None:
                self._record_response(index, done.result())

        future.add_done_callback(_on_done)
        return future

    def _limit_reached(self, fetched: int) -> bool:
        return self.limit is not None and fetched >= self.limit

    def items(self) -> Iterator[Any]:
        """Iterate the items of every page (synchronous only)."""
        if self._asynchronous:
            raise PaginatorError("items() cannot be used on an asynchronous paginator")
        for response in self:
            yield from self.get_page_items(response)

    def pool(
        self,
        concurrency=None,
        response_handler: Optional[Callable] = None,
        exception_handler: Optional[Callable] = None,
    ):
        """Fetch pages through a connector Pool; forces asynchronous mode."""
        self.set_async(True)
        return self.connector.pool(
            self,
            concurrency=concurrency,
            response_handler=response_handler,
            exception_handler=exception_handler,
        )

    def count(self) -> int:
        """
        Total number of pages.

        Sends the first page if nothing has been fetched yet. That page is
        kept aside and does not advance iteration.

        Raises:
            PaginatorError: If the variant cannot determine the total
        """
        response = self._last_response
        if response is None:
            response = self._count_response
        if response is None:
            response = self.connector.send(self.next_request(0, None))
            self._count_response = response

        total = self.total_pages(response)
        if total is None:
            raise PaginatorError(f"{type(self).__name__} cannot determine the total page count")
        return total

    # =========================================================================
    # Serialisation
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connector": self.connector,
            "original_request": self.original_request,
            "limit": self.limit,
            "continue_on_new_loop": self.continue_on_new_loop,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **options) -> "RequestPaginator":
        """Rebuild a paginator from to_dict() output."""
        missing = {"connector", "original_request"} - set(data)
        if missing:
            raise PaginatorError(f"Serialised paginator is missing: {sorted(missing)}")

        paginator = cls(data["connector"], data["original_request"], limit=data.get("limit"), **options)
        paginator.continue_on_new_loop = data.get("continue_on_new_loop", True)
        return paginator

    def __getstate__(self) -> Dict[str, Any]:
        state = {
            key: value for key, value in self.__dict__.items()
            if key not in ("_lock", "_last_response", "_count_response")
        }
        for attribute in self.resolver_attributes:
            state[attribute] = None
        state["continue_on_new_loop"] = self.continue_on_new_loop
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()
        self._last_response = None
        self._last_index = -1
        self._count_response = None
        self.reset_state()
