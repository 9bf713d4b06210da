"""
Shared test fixtures and configuration for pytest.
"""

import json
import logging
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from outbound.core.settings import configure
from outbound.http.connector import Connector
from outbound.http.request import Request
from outbound.transport.base import Transport


logger = logging.getLogger(__name__)


# ============================================================================
# Fakes
# ============================================================================

def make_raw_response(
    status: int = 200,
    body: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> requests.Response:
    """Build a requests.Response without touching the network."""
    raw = requests.Response()
    raw.status_code = status
    raw.headers = CaseInsensitiveDict(headers or {})

    if body is None:
        raw._content = b""
    elif isinstance(body, bytes):
        raw._content = body
    elif isinstance(body, (dict, list)):
        raw._content = json.dumps(body).encode("utf-8")
        raw.headers.setdefault("Content-Type", "application/json")
    else:
        raw._content = str(body).encode("utf-8")
    return raw


class FakeTransport(Transport):
    """
    Transport that records every message and answers from a responder.

    The responder receives the prepared message and returns a
    requests.Response, or an exception to raise.
    """

    def __init__(
        self,
        responder: Optional[Callable[[requests.PreparedRequest], Any]] = None,
        latency: float = 0.0,
        max_workers: int = 10,
    ):
        self.responder = responder or (lambda message: make_raw_response(200, {"ok": True}))
        self.latency = latency
        self.messages: List[requests.PreparedRequest] = []
        self.configs: List[Dict[str, Any]] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fake-transport")

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.messages)

    def send(self, message, config):
        with self._lock:
            self.messages.append(message)
            self.configs.append(dict(config))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.latency:
                time.sleep(self.latency)
            result = self.responder(message)
            if isinstance(result, BaseException):
                raise result
            return result
        finally:
            with self._lock:
                self.active -= 1

    def send_async(self, message, config):
        return self._executor.submit(self.send, message, config)

    def close(self) -> None:
        self._executor.shutdown(wait=True)


class UsersConnector(Connector):
    """Connector for a fictional users API."""

    def resolve_base_url(self) -> str:
        return "https://api.example.com"


class ListUsers(Request):
    """GET /users."""

    def resolve_endpoint(self) -> str:
        return "/users"


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_default_settings():
    """Give every test fresh process-wide settings."""
    configure(None)
    yield
    configure(None)


@pytest.fixture
def raw_response():
    """Fixture providing the make_raw_response factory."""
    return make_raw_response


@pytest.fixture
def fake_transport():
    """Fixture providing a recording transport that answers 200."""
    transport = FakeTransport()
    yield transport
    transport.close()


@pytest.fixture
def transport_factory():
    """Fixture providing a FakeTransport factory; every transport is closed afterwards."""
    created: List[FakeTransport] = []

    def _create(*args, **kwargs) -> FakeTransport:
        transport = FakeTransport(*args, **kwargs)
        created.append(transport)
        return transport

    yield _create

    for transport in created:
        transport.close()


@pytest.fixture
def connector(fake_transport):
    """Fixture providing a UsersConnector wired to the fake transport."""
    return UsersConnector().with_transport(fake_transport)


@pytest.fixture
def list_users():
    """Fixture providing a ListUsers request."""
    return ListUsers()
