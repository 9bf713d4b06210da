"""
Request properties shared by connectors and requests.

Every store is created lazily from the matching ``default_*`` hook, so
subclasses only override the hooks they need and never have to call
``super().__init__()``.
"""

import copy
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..auth.authenticators import Authenticator, BasicAuthenticator, TokenAuthenticator
from ..capabilities.builtin import HasBody
from ..capabilities.registry import CapabilitySpec, default_registry
from ..middleware.pipeline import MiddlewarePipeline
from ..repositories.body import BodyRepository
from ..repositories.stores import ArrayStore, DelayStore


class HasRequestProperties:
    """
    Headers, query, config, body, delay, middleware, authentication,
    mocking and debugging hooks for a connector or request.

    Attributes:
        capabilities: Capabilities declared by this class
    """

    capabilities: Tuple[CapabilitySpec, ...] = ()

    # =========================================================================
    # Defaults (override in subclasses)
    # =========================================================================

    def default_headers(self) -> Dict[str, Any]:
        return {}

    def default_query(self) -> Dict[str, Any]:
        return {}

    def default_config(self) -> Dict[str, Any]:
        return {}

    def default_body(self) -> Any:
        return None

    def default_delay(self) -> Optional[int]:
        return None

    def default_auth(self) -> Optional[Authenticator]:
        return None

    # =========================================================================
    # Stores
    # =========================================================================

    @property
    def headers(self) -> ArrayStore:
        if getattr(self, "_headers", None) is None:
            self._headers = ArrayStore(self.default_headers(), label="headers")
        return self._headers

    @property
    def query(self) -> ArrayStore:
        if getattr(self, "_query", None) is None:
            self._query = ArrayStore(self.default_query(), label="query")
        return self._query

    @property
    def config(self) -> ArrayStore:
        if getattr(self, "_config", None) is None:
            self._config = ArrayStore(self.default_config(), label="config")
        return self._config

    @property
    def delay(self) -> DelayStore:
        if getattr(self, "_delay", None) is None:
            self._delay = DelayStore(self.default_delay())
        return self._delay

    @property
    def middleware(self) -> MiddlewarePipeline:
        if getattr(self, "_middleware", None) is None:
            self._middleware = MiddlewarePipeline()
        return self._middleware

    def body(self) -> Optional[BodyRepository]:
        """
        The body repository, or None when no body capability is attached.

        The repository class comes from the first body capability.
        """
        if getattr(self, "_body", None) is None:
            capability = default_registry.find(self, HasBody)
            if capability is None:
                return None
            self._body = capability.create_body(self.default_body())
        return self._body

    # =========================================================================
    # Capabilities
    # =========================================================================

    def with_capability(self, capability: CapabilitySpec):
        """Attach a capability to this instance only."""
        default_registry.attach(self, capability)
        return self

    def get_capabilities(self) -> List[Any]:
        return default_registry.resolve(self)

    # =========================================================================
    # Authentication and mocking
    # =========================================================================

    def get_authenticator(self) -> Optional[Authenticator]:
        authenticator = getattr(self, "_authenticator", None)
        if authenticator is not None:
            return authenticator
        return self.default_auth()

    def with_auth(self, authenticator: Optional[Authenticator]):
        self._authenticator = authenticator
        return self

    def with_token_auth(self, token: str, prefix: str = "Bearer"):
        return self.with_auth(TokenAuthenticator(token, prefix))

    def with_basic_auth(self, username: str, password: str):
        return self.with_auth(BasicAuthenticator(username, password))

    def get_mock_client(self):
        return getattr(self, "_mock_client", None)

    def with_mock_client(self, mock_client):
        self._mock_client = mock_client
        return self

    # =========================================================================
    # Debugging
    # =========================================================================

    def debug_request(self, callback: Callable[[Any], None]):
        """Call ``callback(pending_request)`` just before dispatch."""
        self._request_debuggers = self.request_debuggers + [callback]
        return self

    def debug_response(self, callback: Callable[[Any], None]):
        """Call ``callback(response)`` at the end of the response pipeline."""
        self._response_debuggers = self.response_debuggers + [callback]
        return self

    @property
    def request_debuggers(self) -> List[Callable]:
        return list(getattr(self, "_request_debuggers", None) or [])

    @property
    def response_debuggers(self) -> List[Callable]:
        return list(getattr(self, "_response_debuggers", None) or [])

    # =========================================================================
    # Hooks
    # =========================================================================

    def boot(self, pending_request) -> None:
        """Run after properties are merged and before middleware executes."""
        pass

    def resolve_response_class(self) -> Optional[type]:
        """Response class to use, or None to defer."""
        return None

    def create_dto_from_response(self, response) -> Any:
        """Hydrate a data object from a response, or None to defer."""
        return None

    # =========================================================================
    # Cloning
    # =========================================================================

    def clone(self):
        """
        Copy with independent property stores.

        The mock client and authenticator are shared with the original.
        """
        cloned = copy.copy(self)
        for attr in ("_headers", "_query", "_config", "_delay", "_middleware", "_body"):
            value = getattr(self, attr, None)
            if value is not None:
                setattr(cloned, attr, value.clone())
        default_registry.copy_attachments(self, cloned)
        return cloned
