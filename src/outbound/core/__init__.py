"""
Core subpackage for the outbound request engine.

Contains enums, exceptions, settings and logging utilities.
"""

from .models import Method, SimulatedResponsePayload
from .exceptions import (
    OutboundError,
    ConfigError,
    PendingRequestError,
    BodyTypeMismatchError,
    InvalidResponseClassError,
    PendingRequestFrozenError,
    FatalRequestError,
    RequestError,
    ClientError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    TooManyRequestsError,
    ServerError,
    InternalServerError,
    ServiceUnavailableError,
    MockClientError,
    NoMockResponseFoundError,
    MockAssertionError,
    PaginatorError,
)
from .settings import Settings, configure, get_default_settings

__all__ = [
    # Models
    "Method",
    "SimulatedResponsePayload",
    # Exceptions
    "OutboundError",
    "ConfigError",
    "PendingRequestError",
    "BodyTypeMismatchError",
    "InvalidResponseClassError",
    "PendingRequestFrozenError",
    "FatalRequestError",
    "RequestError",
    "ClientError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "TooManyRequestsError",
    "ServerError",
    "InternalServerError",
    "ServiceUnavailableError",
    "MockClientError",
    "NoMockResponseFoundError",
    "MockAssertionError",
    "PaginatorError",
    # Settings
    "Settings",
    "configure",
    "get_default_settings",
]
