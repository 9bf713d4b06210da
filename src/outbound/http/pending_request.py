"""
PendingRequest: a connector and a request resolved into one outgoing call.
"""

import logging
from typing import Any, Callable, List, Optional, Type

import requests

from ..capabilities.registry import CapabilityRegistry, default_registry
from ..core.exceptions import (
    BodyTypeMismatchError,
    InvalidResponseClassError,
    PendingRequestError,
    PendingRequestFrozenError,
)
from ..core.models import Method, SimulatedResponsePayload
from ..core.settings import Settings
from ..middleware.builtin import (
    AUTHENTICATE_REQUEST,
    BUILTIN_MIDDLEWARE,
    DEBUG_REQUEST,
    DEBUG_RESPONSE,
    DETERMINE_MOCK_RESPONSE,
    AuthenticateRequest,
    DebugRequest,
    DebugResponse,
    DetermineMockResponse,
)
from ..middleware.pipeline import MiddlewarePipeline
from ..repositories.body import BodyRepository, MultipartBodyRepository
from ..repositories.stores import ArrayStore, DelayStore
from .response import Response
from .url import join_url, merge_query


logger = logging.getLogger(__name__)


class PendingRequest:
    """
    The resolved form of a connector and request.

    Construction runs a fixed protocol:

    1. Resolve URL and method
    2. Resolve and validate the response class
    3. Resolve the mock client (argument, then request, then connector)
    4. Resolve the authenticator (request, then connector)
    5. Boot connector capabilities, then request capabilities
    6. Merge headers, query, config and middleware
    7. Merge body
    8. Merge delay
    9. Run the connector's and the request's boot() hooks
    10. Append global and built-in middleware, run the request phase
    11. Mark ready and lock every store

    Once ready, structural mutators raise PendingRequestFrozenError. The
    one exception is authenticate(), which re-applies credentials
    immediately. The asynchronous flag can still be toggled.

    Raises:
        InvalidResponseClassError: If the response class does not extend Response
        BodyTypeMismatchError: If connector and request bodies differ in kind
        PendingRequestError: If user middleware uses a built-in handler name
    """

    def __init__(
        self,
        connector,
        request,
        mock_client=None,
        settings: Optional[Settings] = None,
        asynchronous: bool = False,
        registry: Optional[CapabilityRegistry] = None,
    ):
        self.connector = connector
        self.request = request
        self.settings = settings or connector.settings
        self._registry = registry or default_registry
        self._asynchronous = asynchronous
        self._ready = False
        self._simulated_response: Optional[SimulatedResponsePayload] = None

        self._headers = ArrayStore(label="headers")
        self._query = ArrayStore(label="query")
        self._config = ArrayStore(label="config")
        self._middleware = MiddlewarePipeline()
        self._delay = DelayStore()
        self._body: Optional[BodyRepository] = None

        self._url = join_url(connector.resolve_base_url(), request.resolve_endpoint())
        self._method = Method.parse(request.method)

        self._response_class = self._resolve_response_class()
        self._mock_client = (
            mock_client or request.get_mock_client() or connector.get_mock_client()
        )
        self._authenticator = request.get_authenticator() or connector.get_authenticator()

        self._registry.boot_all(self, connector, request)

        self._merge_properties()
        self._merge_body()
        self._merge_delay()

        connector.boot(self)
        request.boot(self)

        self._register_default_middleware()
        self._middleware.execute_request_pipeline(self)

        self._ready = True
        self._lock_stores()

        logger.debug(f"PendingRequest ready: {self._method.value} {self._url}")

    # =========================================================================
    # Construction steps
    # =========================================================================

    def _resolve_response_class(self) -> Type[Response]:
        response_class = (
            self.request.resolve_response_class()
            or self.connector.resolve_response_class()
            or Response
        )
        if not (isinstance(response_class, type) and issubclass(response_class, Response)):
            raise InvalidResponseClassError(response_class)
        return response_class

    def _merge_properties(self) -> None:
        connector, request = self.connector, self.request

        self._headers.merge(
            {"User-Agent": self.settings.user_agent},
            connector.headers.all(),
            request.headers.all(),
        )
        self._query.merge(connector.query.all(), request.query.all())
        self._config.merge(connector.config.all(), request.config.all())

        self._middleware.merge(connector.middleware)
        self._middleware.merge(request.middleware)

    def _merge_body(self) -> None:
        connector_body = self.connector.body()
        request_body = self.request.body()

        if connector_body is None and request_body is None:
            return

        if connector_body is not None and request_body is not None:
            if not isinstance(connector_body, type(request_body)):
                raise BodyTypeMismatchError(connector_body, request_body)

            if connector_body.is_mergeable() and request_body.is_mergeable():
                body = connector_body.clone()
                body.merge(request_body.all())
            else:
                body = request_body.clone()
        else:
            body = (request_body or connector_body).clone()

        if isinstance(body, MultipartBodyRepository):
            body.set_multipart_body_factory(self.settings.multipart_body_factory)

        self._body = body

    def _merge_delay(self) -> None:
        request_delay = self.request.delay
        source = request_delay if request_delay.is_not_empty() else self.connector.delay
        self._delay = source.clone()

    def _register_default_middleware(self) -> None:
        if self.settings.middleware is not None:
            self._middleware.merge(self.settings.middleware)

        registered = set(self._middleware.request_names()) | set(self._middleware.response_names())
        reserved = registered & set(BUILTIN_MIDDLEWARE)
        if reserved:
            raise PendingRequestError(
                f"Middleware names are reserved for built-in handlers: {sorted(reserved)}"
            )

        self._middleware.on_request(AuthenticateRequest(), name=AUTHENTICATE_REQUEST)
        self._middleware.on_request(DetermineMockResponse(), name=DETERMINE_MOCK_RESPONSE)
        self._middleware.on_request(DebugRequest(), name=DEBUG_REQUEST)
        self._middleware.on_response(DebugResponse(), name=DEBUG_RESPONSE)

    def _stores(self) -> List[Any]:
        stores = [self._headers, self._query, self._config, self._delay, self._middleware]
        if self._body is not None:
            stores.append(self._body)
        return stores

    def _lock_stores(self) -> None:
        for store in self._stores():
            store.lock()

    def _ensure_building(self, what: str) -> None:
        if self._ready:
            raise PendingRequestFrozenError(
                f"Cannot modify {what} after the PendingRequest is ready"
            )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def url(self) -> str:
        return self._url

    def set_url(self, url: str) -> "PendingRequest":
        self._ensure_building("url")
        self._url = url
        return self

    @property
    def method(self) -> Method:
        return self._method

    def set_method(self, method) -> "PendingRequest":
        self._ensure_building("method")
        self._method = Method.parse(method)
        return self

    @property
    def headers(self) -> ArrayStore:
        return self._headers

    @property
    def query(self) -> ArrayStore:
        return self._query

    @property
    def config(self) -> ArrayStore:
        return self._config

    @property
    def delay(self) -> DelayStore:
        return self._delay

    @property
    def middleware(self) -> MiddlewarePipeline:
        return self._middleware

    def body(self) -> Optional[BodyRepository]:
        return self._body

    @property
    def response_class(self) -> Type[Response]:
        return self._response_class

    @property
    def mock_client(self):
        return self._mock_client

    def set_mock_client(self, mock_client) -> "PendingRequest":
        """Install a mock client; middleware may do this before determine_mock_response runs."""
        self._ensure_building("mock client")
        self._mock_client = mock_client
        return self

    @property
    def is_ready(self) -> bool:
        return self._ready

    # =========================================================================
    # Authentication
    # =========================================================================

    def get_authenticator(self):
        return self._authenticator

    def authenticate(self, authenticator) -> "PendingRequest":
        """
        Replace the authenticator.

        Before the request is ready, the authenticate_request middleware
        applies it. Once ready, it is applied immediately.
        """
        self._authenticator = authenticator

        if self._ready and authenticator is not None:
            stores = self._stores()
            for store in stores:
                store.unlock()
            try:
                authenticator.set(self)
            finally:
                for store in stores:
                    store.lock()
            logger.debug(f"Re-applied {type(authenticator).__name__} to ready PendingRequest")

        return self

    # =========================================================================
    # Simulated responses
    # =========================================================================

    def set_simulated_response(self, payload: Optional[SimulatedResponsePayload]) -> "PendingRequest":
        self._ensure_building("simulated response")
        self._simulated_response = payload
        return self

    def has_simulated_response(self) -> bool:
        return self._simulated_response is not None

    @property
    def simulated_response(self) -> Optional[SimulatedResponsePayload]:
        return self._simulated_response

    # =========================================================================
    # Dispatch metadata
    # =========================================================================

    @property
    def is_asynchronous(self) -> bool:
        return self._asynchronous

    def set_asynchronous(self, asynchronous: bool) -> "PendingRequest":
        self._asynchronous = asynchronous
        return self

    @property
    def request_debuggers(self) -> List[Callable]:
        return self.connector.request_debuggers + self.request.request_debuggers

    @property
    def response_debuggers(self) -> List[Callable]:
        return self.connector.response_debuggers + self.request.response_debuggers

    # =========================================================================
    # Outgoing message
    # =========================================================================

    def get_uri(self) -> str:
        """URL with the resolved query merged over any query already in it."""
        return merge_query(self._url, self._query.all())

    def to_message(self) -> requests.PreparedRequest:
        """
        Build the outgoing message.

        Headers are applied in merge order. The body is only materialised
        when present.
        """
        data = self._body.to_stream() if self._body is not None else None
        return requests.Request(
            method=self._method.value,
            url=self.get_uri(),
            headers=self._headers.all(),
            data=data,
        ).prepare()

    def create_dto_from_response(self, response: Response) -> Any:
        """Hydrate a data object, preferring the request over the connector."""
        dto = self.request.create_dto_from_response(response)
        if dto is None:
            dto = self.connector.create_dto_from_response(response)
        return dto

    def execute_response_pipeline(self, response: Response) -> Response:
        return self._middleware.execute_response_pipeline(response)

    def __repr__(self) -> str:
        state = "ready" if self._ready else "building"
        return f"PendingRequest({self._method.value} {self._url}, {state})"
