"""
Built-in middleware appended to every pipeline after user middleware.

Order is fixed: authenticate_request, determine_mock_response, debug_request
on the request phase and debug_response on the response phase.
"""

import logging
from typing import Optional

from ..core.logging import log_with_context
from ..core.models import SimulatedResponsePayload


logger = logging.getLogger(__name__)


AUTHENTICATE_REQUEST = "authenticate_request"
DETERMINE_MOCK_RESPONSE = "determine_mock_response"
DEBUG_REQUEST = "debug_request"
DEBUG_RESPONSE = "debug_response"

BUILTIN_MIDDLEWARE = (AUTHENTICATE_REQUEST, DETERMINE_MOCK_RESPONSE, DEBUG_REQUEST, DEBUG_RESPONSE)


class AuthenticateRequest:
    """Apply the resolved authenticator, if one is set."""

    def __call__(self, pending_request) -> None:
        authenticator = pending_request.get_authenticator()
        if authenticator is None:
            return None

        logger.debug(f"Authenticating request with {type(authenticator).__name__}")
        authenticator.set(pending_request)
        return None


class DetermineMockResponse:
    """
    Ask the mock client for a simulated response.

    Runs after all user middleware so middleware may install a mock
    client before this point.
    """

    def __call__(self, pending_request) -> Optional[SimulatedResponsePayload]:
        mock_client = pending_request.mock_client
        if mock_client is None:
            return None

        if pending_request.has_simulated_response():
            return None

        return mock_client.guess_next_response(pending_request)


class DebugRequest:
    """Log the final outgoing request and invoke request debuggers."""

    def __call__(self, pending_request) -> None:
        log_with_context(
            logger,
            logging.DEBUG,
            f"Outgoing request {pending_request.method.value} {pending_request.get_uri()}",
            method=pending_request.method.value,
            url=pending_request.url,
        )

        for debugger in pending_request.request_debuggers:
            debugger(pending_request)
        return None


class DebugResponse:
    """Log the incoming response and invoke response debuggers."""

    def __call__(self, response) -> None:
        pending_request = response.pending_request

        log_with_context(
            logger,
            logging.DEBUG,
            f"Incoming response {response.status} for {pending_request.method.value} {pending_request.url}"
            f"{' (simulated)' if response.is_simulated() else ''}",
            method=pending_request.method.value,
            url=pending_request.url,
            status=response.status,
        )

        for debugger in pending_request.response_debuggers:
            debugger(response)
        return None
