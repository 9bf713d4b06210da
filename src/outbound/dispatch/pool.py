"""
Pool for sending many requests with bounded concurrency.
"""

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..core.exceptions import OutboundError
from ..core.logging import RequestLogContext, log_with_context


logger = logging.getLogger(__name__)


ResponseHandler = Callable[[Any, Any], None]
ExceptionHandler = Callable[[BaseException, Any], None]
Concurrency = Union[int, Callable[[int], int]]


class Pool:
    """
    Sends requests from a source with at most ``concurrency`` in flight.

    The source may be:
    - A sequence or any iterable (handlers receive the item index as key)
    - A mapping (handlers receive the mapping key)
    - A generator, consumed lazily as slots free up
    - A callable taking the connector and returning any of the above

    Items may be Request objects, PendingRequest objects or Futures that
    resolve to a Response.

    Handlers fire in completion order, exactly once per item:
    ``response_handler(response, key)`` or ``exception_handler(exception, key)``.
    An item failure never affects its siblings. Exceptions raised by the
    handlers themselves are logged, and reject the aggregate future once
    every item has settled.

    Example:
        >>> pool = connector.pool(
        ...     [GetUser(i) for i in range(10)],
        ...     concurrency=3,
        ...     response_handler=lambda response, key: print(key, response.status),
        ... )
        >>> pool.send().result()
        10
    """

    def __init__(
        self,
        connector,
        requests: Union[Iterable[Any], Mapping[Any, Any], Callable[..., Iterable[Any]]],
        concurrency: Concurrency = 5,
        response_handler: Optional[ResponseHandler] = None,
        exception_handler: Optional[ExceptionHandler] = None,
    ):
        self.connector = connector
        self.requests = requests
        self.concurrency = concurrency
        self.response_handler = response_handler
        self.exception_handler = exception_handler

        self._condition = threading.Condition()
        self._in_flight = 0
        self._settled = 0
        self._handler_errors: List[BaseException] = []
        self._aggregate: Optional[Future] = None

    def with_response_handler(self, handler: ResponseHandler) -> "Pool":
        self.response_handler = handler
        return self

    def with_exception_handler(self, handler: ExceptionHandler) -> "Pool":
        self.exception_handler = handler
        return self

    def set_concurrency(self, concurrency: Concurrency) -> "Pool":
        self.concurrency = concurrency
        return self

    # =========================================================================
    # Sending
    # =========================================================================

    def send(self) -> Future:
        """
        Start sending in the background.

        Returns:
            Future resolving to the number of settled items once every
            item's handler has fired
        """
        if self._aggregate is not None:
            return self._aggregate

        self._aggregate = Future()
        self._aggregate.set_running_or_notify_cancel()

        driver = threading.Thread(target=self._drive, name="outbound-pool", daemon=True)
        driver.start()
        return self._aggregate

    def wait(self, timeout: Optional[float] = None) -> int:
        """Send (if not already started) and block until every item has settled."""
        return self.send().result(timeout=timeout)

    def _drive(self) -> None:
        source_error: Optional[BaseException] = None
        try:
            iterator = self._iter_items()
            while True:
                # Advance the source only once a slot is free; lazy sources send on next().
                self._acquire_slot()
                try:
                    key, item = next(iterator)
                except StopIteration:
                    self._release_slot()
                    break
                except Exception:
                    self._release_slot()
                    raise

                try:
                    future = self._to_future(item)
                except Exception as e:
                    self._on_item_done(key, error=e)
                    continue
                future.add_done_callback(lambda done, key=key: self._on_future_done(key, done))
        except Exception as e:
            logger.error(f"Pool source failed: {e}")
            source_error = e

        with self._condition:
            while self._in_flight > 0:
                self._condition.wait()

        logger.debug(f"Pool settled {self._settled} items")

        if source_error is not None:
            self._aggregate.set_exception(source_error)
        elif self._handler_errors:
            self._aggregate.set_exception(self._handler_errors[0])
        else:
            self._aggregate.set_result(self._settled)

    def _iter_items(self) -> Iterator[Tuple[Any, Any]]:
        source = self.requests
        if callable(source):
            source = source(self.connector)

        if isinstance(source, Mapping):
            return iter(list(source.items()))
        return enumerate(source)

    def _limit(self) -> int:
        concurrency = self.concurrency
        if callable(concurrency):
            concurrency = concurrency(self._in_flight)
        return max(1, int(concurrency))

    def _acquire_slot(self) -> None:
        with self._condition:
            while self._in_flight >= self._limit():
                self._condition.wait()
            self._in_flight += 1

    def _release_slot(self) -> None:
        with self._condition:
            self._in_flight -= 1
            self._condition.notify_all()

    def _to_future(self, item: Any) -> Future:
        from ..http.pending_request import PendingRequest
        from ..http.request import Request

        if isinstance(item, Future):
            return item

        if isinstance(item, Request):
            item = self.connector.create_pending_request(item, asynchronous=True)

        if isinstance(item, PendingRequest):
            item.set_asynchronous(True)
            return item.connector.dispatcher.dispatch(item)

        raise OutboundError(
            f"Pool items must be a Request, PendingRequest or Future, got {type(item).__name__}"
        )

    # =========================================================================
    # Settlement
    # =========================================================================

    def _on_future_done(self, key: Any, future: Future) -> None:
        if future.cancelled():
            self._on_item_done(key, error=_cancelled_error(key))
            return

        exception = future.exception()
        if exception is not None:
            self._on_item_done(key, error=exception)
        else:
            self._on_item_done(key, response=future.result())

    def _on_item_done(self, key: Any, response: Any = None, error: Optional[BaseException] = None) -> None:
        try:
            with RequestLogContext(pool_key=key):
                self._call_handler(key, response, error)
        except Exception as e:
            logger.error(f"Pool handler for item {key!r} raised: {e}")
            with self._condition:
                self._handler_errors.append(e)
        finally:
            with self._condition:
                self._in_flight -= 1
                self._settled += 1
                self._condition.notify_all()

    def _call_handler(self, key: Any, response: Any, error: Optional[BaseException]) -> None:
        if error is None:
            if self.response_handler is not None:
                self.response_handler(response, key)
        elif self.exception_handler is not None:
            self.exception_handler(error, key)
        else:
            log_with_context(logger, logging.WARNING, f"Pool item {key!r} failed: {error}")


def _cancelled_error(key: Any) -> OutboundError:
    return OutboundError(f"Pool item {key!r} was cancelled")
