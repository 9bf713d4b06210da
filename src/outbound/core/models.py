"""
Core enums and contracts shared across the outbound package.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional


class Method(str, Enum):
    """HTTP method of a request."""
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    TRACE = "TRACE"

    @classmethod
    def parse(cls, value) -> "Method":
        """Coerce a string such as 'get' into a Method."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


class SimulatedResponsePayload(ABC):
    """
    A canned response substituted for a real transport call.

    When a PendingRequest carries one of these, the dispatcher never
    touches the transport.
    """

    @property
    @abstractmethod
    def status(self) -> int:
        """HTTP status code of the simulated response."""
        pass

    @property
    @abstractmethod
    def headers(self) -> Dict[str, str]:
        """Headers of the simulated response."""
        pass

    @abstractmethod
    def body_bytes(self) -> bytes:
        """Raw body of the simulated response."""
        pass

    def get_exception(self, pending_request) -> Optional[BaseException]:
        """Exception to surface instead of a response, if any."""
        return None
