"""
Outbound: declarative connectors and requests for HTTP APIs.

A Connector describes an API, a Request describes one call. Sending a
request resolves both into a PendingRequest (merged headers, query,
config, body, middleware and authentication), dispatches it through a
transport or a mock client, and returns a Response.

Example:
    >>> from outbound import Connector, Request, Method
    >>> from outbound.capabilities import AcceptsJson
    >>>
    >>> class GitHub(Connector):
    ...     capabilities = (AcceptsJson,)
    ...
    ...     def resolve_base_url(self):
    ...         return "https://api.github.com"
    >>>
    >>> class GetUser(Request):
    ...     method = Method.GET
    ...
    ...     def __init__(self, username):
    ...         self.username = username
    ...
    ...     def resolve_endpoint(self):
    ...         return f"/users/{self.username}"
    >>>
    >>> response = GitHub().send(GetUser("octocat"))
"""

from .core import (
    Method,
    Settings,
    configure,
    get_default_settings,
    OutboundError,
    PendingRequestError,
    FatalRequestError,
    RequestError,
)
from .http import Connector, Request, PendingRequest, Response
from .mocking import MockClient, MockResponse
from .dispatch import Pool
from .pagination import CursorPaginator, OffsetPaginator, PagedPaginator, RequestPaginator

__version__ = "0.1.0"

__all__ = [
    "Method",
    "Settings",
    "configure",
    "get_default_settings",
    "OutboundError",
    "PendingRequestError",
    "FatalRequestError",
    "RequestError",
    "Connector",
    "Request",
    "PendingRequest",
    "Response",
    "MockClient",
    "MockResponse",
    "Pool",
    "RequestPaginator",
    "PagedPaginator",
    "OffsetPaginator",
    "CursorPaginator",
]
