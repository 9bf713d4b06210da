"""
Transport interface for sending prepared HTTP messages.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Any, Mapping

import requests


class Transport(ABC):
    """
    Abstract base class for transports.

    A transport sends a prepared message and returns the raw response. It
    knows nothing about connectors, middleware or mocking.
    """

    @abstractmethod
    def send(self, message: requests.PreparedRequest, config: Mapping[str, Any]) -> requests.Response:
        """
        Send a message and block until the response arrives.

        Args:
            message: The prepared outgoing message
            config: Resolved request config (timeout, verify, proxies, ...)

        Returns:
            The raw response

        Raises:
            requests.RequestException: If no response could be obtained
        """
        pass

    @abstractmethod
    def send_async(self, message: requests.PreparedRequest, config: Mapping[str, Any]) -> Future:
        """Send a message in the background; the future resolves to the raw response."""
        pass

    def close(self) -> None:
        """Release transport resources."""
        pass
