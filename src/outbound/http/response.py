"""
Response returned by the dispatcher.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional, Type

from requests.structures import CaseInsensitiveDict

from ..core.exceptions import (
    ClientError,
    ForbiddenError,
    InternalServerError,
    NotFoundError,
    RequestError,
    ServerError,
    ServiceUnavailableError,
    TooManyRequestsError,
    UnauthorizedError,
)
from ..core.models import SimulatedResponsePayload


logger = logging.getLogger(__name__)


_STATUS_EXCEPTIONS: Dict[int, Type[RequestError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    429: TooManyRequestsError,
    500: InternalServerError,
    503: ServiceUnavailableError,
}


class Response:
    """
    A response to a PendingRequest, real or simulated.

    Subclass to add API-specific helpers and return the subclass from a
    connector's or request's resolve_response_class().

    Attributes:
        pending_request: The PendingRequest that produced this response
        raw: The transport response (None when simulated)
    """

    def __init__(
        self,
        pending_request,
        status: int,
        headers: Optional[Mapping[str, str]] = None,
        content: bytes = b"",
        raw: Any = None,
        simulated: bool = False,
    ):
        self.pending_request = pending_request
        self._status = status
        self._headers = CaseInsensitiveDict(headers or {})
        self._content = content or b""
        self.raw = raw
        self._simulated = simulated
        self._decoded: Any = None

    @classmethod
    def from_transport(cls, pending_request, raw) -> "Response":
        """Build from a requests.Response."""
        return cls(
            pending_request,
            status=raw.status_code,
            headers=raw.headers,
            content=raw.content,
            raw=raw,
        )

    @classmethod
    def from_simulated(cls, pending_request, payload: SimulatedResponsePayload) -> "Response":
        return cls(
            pending_request,
            status=payload.status,
            headers=payload.headers,
            content=payload.body_bytes(),
            simulated=True,
        )

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> CaseInsensitiveDict:
        return self._headers

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._headers.get(name, default)

    @property
    def content(self) -> bytes:
        return self._content

    def body(self) -> str:
        return self._content.decode("utf-8", errors="replace")

    def json(self, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Decode the body as JSON.

        Args:
            key: Optional dotted key to pick from the decoded object
            default: Returned when the key is missing

        Returns:
            The decoded body, or the value at ``key``. An empty body
            decodes to an empty dict.
        """
        if self._decoded is None:
            self._decoded = json.loads(self._content) if self._content else {}

        if key is None:
            return self._decoded

        value = self._decoded
        for part in key.split("."):
            if isinstance(value, Mapping) and part in value:
                value = value[part]
            elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
                value = value[int(part)]
            else:
                return default
        return value

    def is_simulated(self) -> bool:
        return self._simulated

    # =========================================================================
    # Status
    # =========================================================================

    def successful(self) -> bool:
        return 200 <= self._status < 300

    def ok(self) -> bool:
        return self._status == 200

    def redirect(self) -> bool:
        return 300 <= self._status < 400

    def failed(self) -> bool:
        return self.server_error() or self.client_error()

    def client_error(self) -> bool:
        return 400 <= self._status < 500

    def server_error(self) -> bool:
        return self._status >= 500

    def to_exception(self) -> Optional[RequestError]:
        """Return the matching RequestError for a failed response, else None."""
        if not self.failed():
            return None

        exception_class = _STATUS_EXCEPTIONS.get(self._status)
        if exception_class is None:
            exception_class = ServerError if self.server_error() else ClientError
        return exception_class(self)

    def throw(self) -> "Response":
        """
        Raise if the response failed.

        Raises:
            RequestError: Subclass matching the status code
        """
        exception = self.to_exception()
        if exception is not None:
            logger.debug(f"Raising {type(exception).__name__} for status {self._status}")
            raise exception
        return self

    # =========================================================================
    # Data objects
    # =========================================================================

    def dto(self) -> Any:
        """Hydrate a data object through the request, then the connector."""
        return self.pending_request.create_dto_from_response(self)

    def dto_or_fail(self) -> Any:
        """Like dto(), but raise first if the response failed."""
        self.throw()
        return self.dto()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self._status}{', simulated' if self._simulated else ''})"
