"""
Built-in capabilities for connectors and requests.
"""

from typing import Optional, Type

from ..repositories.body import (
    BodyRepository,
    FormBodyRepository,
    JsonBodyRepository,
    MultipartBodyRepository,
    StreamBodyRepository,
    StringBodyRepository,
)
from .registry import Capability


class AcceptsJson(Capability):
    """Send Accept: application/json."""

    def boot(self, pending_request) -> None:
        pending_request.headers.add("Accept", "application/json")


class HasBody(Capability):
    """
    Base for body capabilities.

    Decides which repository the owner's body() builds from its
    default_body(), and which Content-Type header is sent.
    """

    body_class: Type[BodyRepository] = StringBodyRepository
    content_type: Optional[str] = None

    def create_body(self, value) -> BodyRepository:
        return self.body_class(value)

    def boot(self, pending_request) -> None:
        if self.content_type:
            pending_request.headers.add("Content-Type", self.content_type)


class HasStringBody(HasBody):
    body_class = StringBodyRepository


class HasJsonBody(HasBody):
    body_class = JsonBodyRepository
    content_type = "application/json"


class HasFormBody(HasBody):
    body_class = FormBodyRepository
    content_type = "application/x-www-form-urlencoded"


class HasXmlBody(HasBody):
    body_class = StringBodyRepository
    content_type = "application/xml"


class HasStreamBody(HasBody):
    body_class = StreamBodyRepository


class HasMultipartBody(HasBody):
    """
    Multipart body.

    The boundary is only known once the body has been merged, so the
    Content-Type header is written by a named request middleware.
    """

    body_class = MultipartBodyRepository

    def create_body(self, value) -> BodyRepository:
        return MultipartBodyRepository(value or [])

    def boot(self, pending_request) -> None:
        pending_request.middleware.on_request(_set_multipart_content_type, name="multipart_content_type")


def _set_multipart_content_type(pending_request) -> None:
    body = pending_request.body()
    if isinstance(body, MultipartBodyRepository):
        pending_request.headers.add("Content-Type", body.content_type())


class JsonApi(Capability):
    """Sends and accepts JSON."""

    requires = (AcceptsJson, HasJsonBody)


class HasTimeout(Capability):
    """
    Transport timeout from the owner.

    Reads ``connect_timeout`` and ``request_timeout`` (seconds) from the
    owner. Explicit "timeout" config on the connector or request wins.
    """

    default_connect_timeout: float = 10.0
    default_request_timeout: float = 30.0

    def boot(self, pending_request) -> None:
        connect = getattr(self.owner, "connect_timeout", self.default_connect_timeout)
        read = getattr(self.owner, "request_timeout", self.default_request_timeout)
        pending_request.config.add("timeout", (connect, read))


class HasCustomUserAgent(Capability):
    """
    Replace the default User-Agent with the owner's ``user_agent``.

    Applied as a named request middleware because the default User-Agent
    is written by the header merge, which runs after capabilities boot.
    """

    def boot(self, pending_request) -> None:
        user_agent = getattr(self.owner, "user_agent", None)
        if not user_agent:
            return

        def _apply(pending):
            pending.headers.add("User-Agent", user_agent)

        pending_request.middleware.on_request(_apply, name="custom_user_agent")


class AlwaysThrowOnErrors(Capability):
    """Raise a RequestError for every failed response."""

    def boot(self, pending_request) -> None:
        pending_request.middleware.on_response(_throw_on_error, name="always_throw_on_errors")


def _throw_on_error(response) -> None:
    response.throw()
    return None
