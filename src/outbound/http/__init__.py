"""
Connectors, requests, pending requests and responses.
"""

from .properties import HasRequestProperties
from .request import Request
from .connector import Connector
from .pending_request import PendingRequest
from .response import Response
from .url import is_absolute_url, join_url, merge_query

__all__ = [
    "HasRequestProperties",
    "Request",
    "Connector",
    "PendingRequest",
    "Response",
    "is_absolute_url",
    "join_url",
    "merge_query",
]
