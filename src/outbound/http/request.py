"""
Request base class.
"""

from abc import ABC, abstractmethod
from typing import Union

from ..core.models import Method
from .properties import HasRequestProperties


class Request(HasRequestProperties, ABC):
    """
    Abstract base class for a single API call.

    Subclasses set ``method`` and implement resolve_endpoint(). Every
    other property is optional and overrides the connector's on merge.

    Example:
        >>> class GetUser(Request):
        ...     method = Method.GET
        ...
        ...     def __init__(self, user_id: int):
        ...         self.user_id = user_id
        ...
        ...     def resolve_endpoint(self) -> str:
        ...         return f"/users/{self.user_id}"
    """

    method: Union[Method, str] = Method.GET

    @abstractmethod
    def resolve_endpoint(self) -> str:
        """
        Return the endpoint path, relative to the connector base URL.

        An absolute URL replaces the base URL. The endpoint may carry its
        own query string.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({Method.parse(self.method).value} {self.resolve_endpoint()})"
