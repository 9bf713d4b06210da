"""
Custom exceptions for the outbound request engine.
"""

from typing import Any, Optional


class OutboundError(Exception):
    """Base exception for all outbound errors."""
    pass


class ConfigError(OutboundError):
    """
    Error in outbound settings.

    Raised when:
    - A settings file is missing or not a mapping
    - A settings value has the wrong type
    """
    pass


class PendingRequestError(OutboundError):
    """
    Error while resolving a connector and request into a PendingRequest.

    Resolution errors are always raised synchronously, before any
    dispatch is attempted.
    """
    pass


class BodyTypeMismatchError(PendingRequestError):
    """Raised when the connector and request declare bodies of different kinds."""

    def __init__(self, connector_body: Any = None, request_body: Any = None):
        message = "Connector and request body types must be the same."
        if connector_body is not None and request_body is not None:
            message = (
                f"{message} Got {type(connector_body).__name__} on the connector "
                f"and {type(request_body).__name__} on the request."
            )
        super().__init__(message)
        self.connector_body = connector_body
        self.request_body = request_body


class InvalidResponseClassError(PendingRequestError):
    """Raised when the resolved response class does not implement the Response contract."""

    def __init__(self, response_class: Any = None):
        super().__init__(
            f"The provided response class must exist and extend Response, got: {response_class!r}"
        )
        self.response_class = response_class


class PendingRequestFrozenError(PendingRequestError):
    """Raised when a structural field is modified after the PendingRequest is ready."""
    pass


class FatalRequestError(OutboundError):
    """
    The transport failed to produce a response.

    Raised when:
    - The host is unreachable or the connection drops
    - The request times out at the transport level

    Never retried by the engine.
    """

    def __init__(self, message: str, pending_request: Any = None):
        super().__init__(message)
        self.pending_request = pending_request


class RequestError(OutboundError):
    """
    The server answered with a failed status code.

    Raised by Response.throw() and the AlwaysThrowOnErrors capability.
    """

    def __init__(self, response: Any, message: Optional[str] = None):
        if message is None:
            message = self._build_message(response)
        super().__init__(message)
        self.response = response
        self.status = getattr(response, "status", None)

    @staticmethod
    def _build_message(response: Any) -> str:
        status = getattr(response, "status", "?")
        pending = getattr(response, "pending_request", None)
        method = getattr(getattr(pending, "method", None), "value", "")
        url = getattr(pending, "url", "")
        try:
            body = response.body()
        except (AttributeError, TypeError):
            body = ""
        if len(body) > 200:
            body = body[:200] + "..."
        return f"{method} {url} failed with status {status}: {body}".strip()


class ClientError(RequestError):
    """4xx response."""
    pass


class UnauthorizedError(ClientError):
    """401 Unauthorized."""
    pass


class ForbiddenError(ClientError):
    """403 Forbidden."""
    pass


class NotFoundError(ClientError):
    """404 Not Found."""
    pass


class TooManyRequestsError(ClientError):
    """429 Too Many Requests."""
    pass


class ServerError(RequestError):
    """5xx response."""
    pass


class InternalServerError(ServerError):
    """500 Internal Server Error."""
    pass


class ServiceUnavailableError(ServerError):
    """503 Service Unavailable."""
    pass


class MockClientError(OutboundError):
    """Error raised by the mock client or its assertions."""
    pass


class NoMockResponseFoundError(MockClientError):
    """Raised when a mock client has no response for a pending request."""
    pass


class MockAssertionError(MockClientError, AssertionError):
    """Raised by MockClient assertions such as assert_sent()."""
    pass


class PaginatorError(OutboundError):
    """
    Error with a request paginator.

    Raised when:
    - The total page count is requested but cannot be determined
    - Serialised paginator state is incomplete
    """
    pass
