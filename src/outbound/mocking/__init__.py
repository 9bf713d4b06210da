"""
Simulated responses for tests.
"""

from .mock_client import MockClient, MockResponse

__all__ = ["MockClient", "MockResponse"]
