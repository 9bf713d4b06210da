"""
Authenticators applied to a PendingRequest by the authenticate_request middleware.
"""

import base64
from abc import ABC, abstractmethod
from typing import List


class Authenticator(ABC):
    """
    Abstract base class for authenticators.

    An authenticator writes credentials onto a pending request. It must be
    safe to apply more than once, since PendingRequest.authenticate() may
    re-apply it after the request is ready.
    """

    @abstractmethod
    def set(self, pending_request) -> None:
        """Apply credentials to the pending request."""
        pass


class TokenAuthenticator(Authenticator):
    """Authorization: <prefix> <token>."""

    def __init__(self, token: str, prefix: str = "Bearer"):
        self.token = token
        self.prefix = prefix

    def set(self, pending_request) -> None:
        value = f"{self.prefix} {self.token}" if self.prefix else self.token
        pending_request.headers.add("Authorization", value)


class BasicAuthenticator(Authenticator):
    """HTTP basic authentication."""

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def set(self, pending_request) -> None:
        credentials = f"{self.username}:{self.password}".encode("utf-8")
        encoded = base64.b64encode(credentials).decode("ascii")
        pending_request.headers.add("Authorization", f"Basic {encoded}")


class QueryAuthenticator(Authenticator):
    """Credentials passed as a query parameter."""

    def __init__(self, parameter: str, value: str):
        self.parameter = parameter
        self.value = value

    def set(self, pending_request) -> None:
        pending_request.query.add(self.parameter, self.value)


class HeaderAuthenticator(Authenticator):
    """Credentials passed in an arbitrary header (e.g. X-API-Key)."""

    def __init__(self, value: str, header_name: str = "Authorization"):
        self.value = value
        self.header_name = header_name

    def set(self, pending_request) -> None:
        pending_request.headers.add(self.header_name, self.value)


class MultiAuthenticator(Authenticator):
    """Apply several authenticators in order."""

    def __init__(self, *authenticators: Authenticator):
        self.authenticators: List[Authenticator] = list(authenticators)

    def set(self, pending_request) -> None:
        for authenticator in self.authenticators:
            authenticator.set(pending_request)
