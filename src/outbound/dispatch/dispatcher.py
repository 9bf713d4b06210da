"""
Dispatcher for resolved PendingRequests.
"""

import logging
import threading
import time
import uuid
from concurrent.futures import Future
from typing import Union

import requests

from ..core.exceptions import FatalRequestError
from ..core.logging import RequestLogContext, log_with_context
from ..transport.base import Transport
from .futures import chain, failed_future, settle


logger = logging.getLogger(__name__)


class RequestDispatcher:
    """
    Sends a ready PendingRequest and runs its response pipeline.

    Returns a Response for synchronous pending requests and a Future for
    asynchronous ones. Simulated responses never reach the transport.
    Transport failures are wrapped in FatalRequestError and never retried.
    """

    def __init__(self, transport: Transport):
        self.transport = transport

    def dispatch(self, pending_request) -> Union[object, Future]:
        """
        Send a pending request.

        Args:
            pending_request: A ready PendingRequest

        Returns:
            The response, or a Future resolving to it when asynchronous

        Raises:
            FatalRequestError: Synchronous transport failure
        """
        context = RequestLogContext(
            request_id=uuid.uuid4().hex[:12],
            connector=type(pending_request.connector).__name__,
            request=type(pending_request.request).__name__,
            method=pending_request.method.value,
            url=pending_request.url,
        )
        with context:
            log_with_context(logger, logging.DEBUG, f"Dispatching {pending_request.method.value} {pending_request.url}")

            if pending_request.has_simulated_response():
                return self._dispatch_simulated(pending_request)

            if pending_request.is_asynchronous:
                return self._dispatch_async(pending_request)

            return self._dispatch_sync(pending_request)

    # =========================================================================
    # Simulated
    # =========================================================================

    def _dispatch_simulated(self, pending_request):
        payload = pending_request.simulated_response
        log_with_context(logger, logging.DEBUG, f"Using simulated response ({payload.status})")

        exception = payload.get_exception(pending_request)
        if exception is not None:
            if pending_request.is_asynchronous:
                return failed_future(exception)
            raise exception

        if not pending_request.is_asynchronous:
            return self._handle_simulated(pending_request, payload)

        future: Future = Future()
        settle(future, lambda: self._handle_simulated(pending_request, payload))
        return future

    def _handle_simulated(self, pending_request, payload):
        response = pending_request.response_class.from_simulated(pending_request, payload)

        mock_client = pending_request.mock_client
        if mock_client is not None:
            mock_client.record_response(response)

        return pending_request.execute_response_pipeline(response)

    # =========================================================================
    # Transport
    # =========================================================================

    def _dispatch_sync(self, pending_request):
        self._wait_for_delay(pending_request)

        message = pending_request.to_message()
        try:
            raw = self.transport.send(message, pending_request.config.all())
        except requests.RequestException as e:
            raise self._wrap_transport_error(e, pending_request) from e

        return self._handle_transport_response(pending_request, raw)

    def _dispatch_async(self, pending_request) -> Future:
        message = pending_request.to_message()
        config = pending_request.config.all()
        outer: Future = Future()

        def _start() -> None:
            if not outer.set_running_or_notify_cancel():
                return
            try:
                inner = self.transport.send_async(message, config)
            except requests.RequestException as e:
                outer.set_exception(self._wrap_transport_error(e, pending_request))
                return
            chain(inner, lambda raw: self._handle_transport_response(pending_request, raw)).add_done_callback(
                lambda done: self._settle_outer(outer, done, pending_request)
            )

        delay = pending_request.delay.get()
        if delay:
            timer = threading.Timer(delay / 1000.0, _start)
            timer.daemon = True
            timer.start()
        else:
            _start()

        return outer

    def _settle_outer(self, outer: Future, done: Future, pending_request) -> None:
        exception = done.exception()
        if isinstance(exception, requests.RequestException):
            outer.set_exception(self._wrap_transport_error(exception, pending_request))
        elif exception is not None:
            outer.set_exception(exception)
        else:
            outer.set_result(done.result())

    def _handle_transport_response(self, pending_request, raw):
        response = pending_request.response_class.from_transport(pending_request, raw)
        return pending_request.execute_response_pipeline(response)

    def _wait_for_delay(self, pending_request) -> None:
        delay = pending_request.delay.get()
        if delay:
            logger.debug(f"Delaying request by {delay}ms")
            time.sleep(delay / 1000.0)

    @staticmethod
    def _wrap_transport_error(error: Exception, pending_request) -> FatalRequestError:
        log_with_context(
            logger,
            logging.WARNING,
            f"Transport failed for {pending_request.method.value} {pending_request.url}: {error}",
        )
        wrapped = FatalRequestError(str(error), pending_request)
        wrapped.__cause__ = error
        return wrapped
