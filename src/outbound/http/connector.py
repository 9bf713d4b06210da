"""
Connector base class.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ..core.settings import Settings, get_default_settings
from .properties import HasRequestProperties


logger = logging.getLogger(__name__)


class Connector(HasRequestProperties, ABC):
    """
    Abstract base class for an API.

    A connector is long-lived and shared across many calls. Per-call data
    lives on the PendingRequest; nothing is written back to the connector
    during resolution or dispatch.

    Example:
        >>> class GitHub(Connector):
        ...     capabilities = (AcceptsJson,)
        ...
        ...     def resolve_base_url(self) -> str:
        ...         return "https://api.github.com"
        ...
        >>> response = GitHub().send(GetUser(1))
    """

    @abstractmethod
    def resolve_base_url(self) -> str:
        """Return the base URL every request endpoint is joined to."""
        pass

    @property
    def settings(self) -> Settings:
        return getattr(self, "_settings", None) or get_default_settings()

    def with_settings(self, settings: Settings) -> "Connector":
        self._settings = settings
        return self

    # =========================================================================
    # Transport
    # =========================================================================

    def default_transport(self):
        """Create the transport used when none was set. Override to customise."""
        from ..transport.requests_transport import RequestsTransport
        return RequestsTransport(
            max_workers=self.settings.max_workers,
            timeout=self.settings.timeout,
        )

    @property
    def transport(self):
        if getattr(self, "_transport", None) is None:
            with _transport_lock:
                if getattr(self, "_transport", None) is None:
                    self._transport = self.default_transport()
        return self._transport

    def with_transport(self, transport) -> "Connector":
        self._transport = transport
        return self

    @property
    def dispatcher(self):
        from ..dispatch.dispatcher import RequestDispatcher
        return RequestDispatcher(self.transport)

    # =========================================================================
    # Sending
    # =========================================================================

    def create_pending_request(self, request, mock_client=None, asynchronous: bool = False):
        """
        Resolve a request against this connector.

        Raises:
            PendingRequestError: If resolution fails; never deferred to a future
        """
        from .pending_request import PendingRequest
        return PendingRequest(
            self,
            request,
            mock_client=mock_client,
            settings=self.settings,
            asynchronous=asynchronous,
        )

    def send(self, request, mock_client=None):
        """
        Resolve and send a request, blocking until the response arrives.

        Args:
            request: The Request to send
            mock_client: Optional MockClient, overriding request and connector mocks

        Returns:
            Response (or the resolved response class)

        Raises:
            PendingRequestError: If resolution fails
            FatalRequestError: If the transport fails
        """
        pending_request = self.create_pending_request(request, mock_client)
        return self.dispatcher.dispatch(pending_request)

    def send_async(self, request, mock_client=None) -> Future:
        """
        Resolve a request now and send it in the background.

        Resolution errors are raised here. Transport errors reject the
        returned future.
        """
        pending_request = self.create_pending_request(request, mock_client, asynchronous=True)
        return self.dispatcher.dispatch(pending_request)

    def pool(
        self,
        requests: Union[Iterable[Any], Dict[Any, Any], Callable[..., Iterable[Any]]],
        concurrency: Union[int, Callable[[int], int], None] = None,
        response_handler: Optional[Callable] = None,
        exception_handler: Optional[Callable] = None,
    ):
        """Create a Pool sending many requests with bounded concurrency."""
        from ..dispatch.pool import Pool
        return Pool(
            self,
            requests,
            concurrency=concurrency if concurrency is not None else self.settings.pool_concurrency,
            response_handler=response_handler,
            exception_handler=exception_handler,
        )

    def paginate(self, request, paginator_class=None, **options):
        """
        Create a paginator for a request.

        Args:
            request: The first-page request template
            paginator_class: RequestPaginator subclass (PagedPaginator by default)
            **options: Passed to the paginator constructor
        """
        if paginator_class is None:
            from ..pagination.paged import PagedPaginator
            paginator_class = PagedPaginator
        return paginator_class(self, request, **options)

    def close(self) -> None:
        """Close the transport, if one was created."""
        transport = getattr(self, "_transport", None)
        if transport is not None:
            transport.close()
            self._transport = None

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state.pop("_transport", None)
        return state


_transport_lock = threading.Lock()
