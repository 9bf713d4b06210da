"""
Mock client and simulated responses for testing connectors without a network.
"""

import fnmatch
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from ..core.exceptions import MockAssertionError, NoMockResponseFoundError
from ..core.models import SimulatedResponsePayload


logger = logging.getLogger(__name__)


class MockResponse(SimulatedResponsePayload):
    """
    A canned response.

    Dict and list bodies are JSON encoded and get a JSON Content-Type
    unless one is given.

    Example:
        >>> MockResponse({"id": 1}, status=201)
        >>> MockResponse.make("Server Error", 500)
        >>> MockResponse().throw(lambda pending: ConnectionError("boom"))
    """

    def __init__(
        self,
        body: Any = None,
        status: int = 200,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self._body = body
        self._status = status
        self._headers: Dict[str, str] = dict(headers or {})
        self._exception: Optional[Union[BaseException, Callable[[Any], BaseException]]] = None

        if isinstance(body, (dict, list)) and not any(k.lower() == "content-type" for k in self._headers):
            self._headers["Content-Type"] = "application/json"

    @classmethod
    def make(cls, body: Any = None, status: int = 200, headers: Optional[Mapping[str, str]] = None) -> "MockResponse":
        return cls(body, status, headers)

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def body(self) -> Any:
        return self._body

    def body_bytes(self) -> bytes:
        if self._body is None:
            return b""
        if isinstance(self._body, bytes):
            return self._body
        if isinstance(self._body, (dict, list)):
            return json.dumps(self._body).encode("utf-8")
        return str(self._body).encode("utf-8")

    def throw(self, exception: Union[BaseException, Callable[[Any], BaseException]]) -> "MockResponse":
        """Surface an exception instead of a response (simulates a transport failure)."""
        self._exception = exception
        return self

    def get_exception(self, pending_request) -> Optional[BaseException]:
        if self._exception is None:
            return None
        if isinstance(self._exception, BaseException):
            return self._exception
        return self._exception(pending_request)

    def __repr__(self) -> str:
        return f"MockResponse(status={self._status})"


MockValue = Union[SimulatedResponsePayload, Callable[[Any], SimulatedResponsePayload]]


class MockClient:
    """
    Supplies simulated responses to pending requests.

    Responses may be given as a sequence (consumed in order) or as a
    mapping keyed by request class, connector class or URL pattern
    (``fnmatch`` style, e.g. ``"*/users/*"``). Values may be a payload or
    a callable taking the pending request. Lookup order: request class,
    connector class, URL pattern, then the sequence.

    Every response produced through a mock is recorded for assertions.
    """

    def __init__(self, responses: Optional[Union[Sequence[MockValue], Mapping[Any, MockValue]]] = None):
        self._lock = threading.Lock()
        self._sequence: List[MockValue] = []
        self._keyed: Dict[Any, MockValue] = {}
        self._recorded: List[Any] = []

        if isinstance(responses, Mapping):
            for key, value in responses.items():
                self.add_response(value, key)
        elif responses is not None:
            for value in responses:
                self.add_response(value)

    def add_response(self, response: MockValue, key: Any = None) -> "MockClient":
        """Add a response to the sequence, or under a key."""
        with self._lock:
            if key is None:
                self._sequence.append(response)
            else:
                self._keyed[key] = response
        return self

    def is_empty(self) -> bool:
        with self._lock:
            return not self._sequence and not self._keyed

    def guess_next_response(self, pending_request) -> SimulatedResponsePayload:
        """
        Find the simulated response for a pending request.

        Raises:
            NoMockResponseFoundError: If nothing matches and the sequence is empty
        """
        with self._lock:
            value = self._match_keyed(pending_request)
            if value is None and self._sequence:
                value = self._sequence.pop(0)

        if value is None:
            raise NoMockResponseFoundError(
                f"No mock response found for {type(pending_request.request).__name__} "
                f"({pending_request.method.value} {pending_request.url})"
            )

        if isinstance(value, SimulatedResponsePayload):
            return value

        payload = value(pending_request)
        if not isinstance(payload, SimulatedResponsePayload):
            raise TypeError(
                f"Mock response callables must return a SimulatedResponsePayload, got {type(payload).__name__}"
            )
        return payload

    def _match_keyed(self, pending_request) -> Optional[MockValue]:
        request_type = type(pending_request.request)
        connector_type = type(pending_request.connector)

        for key, value in self._keyed.items():
            if isinstance(key, type) and issubclass(request_type, key):
                return value
        for key, value in self._keyed.items():
            if isinstance(key, type) and issubclass(connector_type, key):
                return value
        for key, value in self._keyed.items():
            if isinstance(key, str) and self._url_matches(key, pending_request):
                return value
        return None

    @staticmethod
    def _url_matches(pattern: str, pending_request) -> bool:
        url = pending_request.url
        return fnmatch.fnmatchcase(url, pattern) or fnmatch.fnmatchcase(str(pending_request.get_uri()), pattern)

    # =========================================================================
    # Recording
    # =========================================================================

    def record_response(self, response) -> None:
        with self._lock:
            self._recorded.append(response)

    def recorded_responses(self) -> List[Any]:
        with self._lock:
            return list(self._recorded)

    def recorded_requests(self) -> List[Any]:
        return [response.pending_request.request for response in self.recorded_responses()]

    def last_response(self):
        recorded = self.recorded_responses()
        return recorded[-1] if recorded else None

    def last_request(self):
        response = self.last_response()
        return response.pending_request.request if response is not None else None

    def last_pending_request(self):
        response = self.last_response()
        return response.pending_request if response is not None else None

    # =========================================================================
    # Assertions
    # =========================================================================

    def _matches(self, matcher: Any, response) -> bool:
        pending = response.pending_request
        if isinstance(matcher, type):
            return isinstance(pending.request, matcher)
        if isinstance(matcher, str):
            return self._url_matches(matcher, pending)
        if callable(matcher):
            return bool(matcher(pending.request, response))
        raise TypeError(f"Unsupported matcher: {matcher!r}")

    def _count(self, matcher: Any = None) -> int:
        responses = self.recorded_responses()
        if matcher is None:
            return len(responses)
        return sum(1 for response in responses if self._matches(matcher, response))

    def assert_sent(self, matcher: Any) -> None:
        if self._count(matcher) == 0:
            raise MockAssertionError(f"Expected a request matching {matcher!r} to be sent")

    def assert_not_sent(self, matcher: Any) -> None:
        if self._count(matcher) > 0:
            raise MockAssertionError(f"Expected no request matching {matcher!r} to be sent")

    def assert_sent_count(self, count: int, matcher: Any = None) -> None:
        actual = self._count(matcher)
        if actual != count:
            raise MockAssertionError(f"Expected {count} requests to be sent, got {actual}")

    def assert_nothing_sent(self) -> None:
        self.assert_sent_count(0)

    def __getstate__(self) -> Dict[str, Any]:
        state = self.__dict__.copy()
        state.pop("_lock", None)
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.Lock()
