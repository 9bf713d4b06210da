"""
Unit tests for RequestDispatcher, Connector.send and Connector.send_async.
"""

import time
from concurrent.futures import Future

import pytest
import requests

from outbound.core.exceptions import FatalRequestError, NotFoundError, PendingRequestFrozenError
from outbound.mocking.mock_client import MockClient, MockResponse


class TestSyncDispatch:
    """Tests for blocking dispatch."""

    def test_send_returns_response(self, connector, list_users, fake_transport):
        """Test a real send goes through the transport once."""
        response = connector.send(list_users)

        assert response.status == 200
        assert response.json() == {"ok": True}
        assert not response.is_simulated()
        assert fake_transport.call_count == 1
        assert fake_transport.messages[0].url == "https://api.example.com/users"

    def test_config_passed_to_transport(self, connector, list_users, fake_transport):
        """Test the resolved config reaches the transport."""
        list_users.config.add("timeout", 3)

        connector.send(list_users)

        assert fake_transport.configs[0] == {"timeout": 3}

    def test_simulated_response_never_touches_transport(self, connector, list_users, fake_transport):
        """Test simulated responses bypass the transport entirely."""
        response = connector.send(list_users, MockClient([MockResponse({"mocked": True}, 202)]))

        assert response.status == 202
        assert response.is_simulated()
        assert fake_transport.call_count == 0

    def test_transport_error_wrapped(self, connector, list_users, fake_transport):
        """Test transport failures are wrapped with the pending request."""
        fake_transport.responder = lambda message: requests.ConnectionError("unreachable")

        with pytest.raises(FatalRequestError) as exc_info:
            connector.send(list_users)

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert exc_info.value.pending_request.url == "https://api.example.com/users"
        assert fake_transport.call_count == 1

    def test_mock_throw_raises_synchronously(self, connector, list_users):
        """Test MockResponse.throw surfaces its exception from send()."""
        mock_client = MockClient([MockResponse().throw(FatalRequestError("simulated outage"))])

        with pytest.raises(FatalRequestError, match="simulated outage"):
            connector.send(list_users, mock_client)

    def test_failed_status_is_not_raised_by_default(self, connector, list_users, fake_transport, raw_response):
        """Test error statuses are returned, not raised, unless asked."""
        fake_transport.responder = lambda message: raw_response(404, {"error": "missing"})
        response = connector.send(list_users)

        assert response.failed()
        with pytest.raises(NotFoundError):
            response.throw()

    def test_delay_applied_to_real_sends(self, connector, list_users):
        """Test the resolved delay is waited before a real send."""
        list_users.delay.set(50)

        start = time.monotonic()
        connector.send(list_users)

        assert time.monotonic() - start >= 0.05

    def test_dispatch_logs_with_request_id(self, connector, list_users, caplog):
        """Test each dispatch logs under its own request id."""
        with caplog.at_level("DEBUG", logger="outbound.dispatch.dispatcher"):
            connector.send(list_users)
            connector.send(list_users)

        records = [r for r in caplog.records if r.getMessage().startswith("Dispatching")]
        assert len(records) == 2
        assert records[0].request_id != records[1].request_id
        assert records[0].connector == "UsersConnector"
        assert records[0].url == "https://api.example.com/users"

    def test_response_pipeline_cannot_modify_request(self, connector, list_users):
        """Test the pending request stays frozen during the response phase."""
        errors = []

        def late_header(response):
            try:
                response.pending_request.headers.add("X-Late", "1")
            except PendingRequestFrozenError as e:
                errors.append(e)

        connector.middleware.on_response(late_header)
        connector.send(list_users)

        assert len(errors) == 1


class TestAsyncDispatch:
    """Tests for non-blocking dispatch."""

    def test_send_async_returns_future(self, connector, list_users, fake_transport):
        """Test send_async resolves to a response."""
        future = connector.send_async(list_users)

        assert isinstance(future, Future)
        response = future.result(timeout=5)
        assert response.status == 200
        assert fake_transport.call_count == 1

    def test_async_simulated(self, connector, list_users, fake_transport):
        """Test asynchronous simulated responses still skip the transport."""
        future = connector.send_async(list_users, MockClient([MockResponse({"a": 1})]))

        assert future.result(timeout=5).json("a") == 1
        assert fake_transport.call_count == 0

    def test_async_transport_error_rejects_future(self, connector, list_users, fake_transport):
        """Test transport errors reject the future instead of raising."""
        fake_transport.responder = lambda message: requests.Timeout("too slow")
        future = connector.send_async(list_users)

        with pytest.raises(FatalRequestError):
            future.result(timeout=5)

    def test_async_mock_throw_rejects_future(self, connector, list_users):
        """Test MockResponse.throw rejects the future in async mode."""
        mock_client = MockClient([MockResponse().throw(RuntimeError("boom"))])

        future = connector.send_async(list_users, mock_client)

        with pytest.raises(RuntimeError, match="boom"):
            future.result(timeout=5)

    def test_resolution_errors_are_synchronous(self, connector, list_users):
        """Test resolution failures raise from send_async itself."""
        list_users.resolve_response_class = lambda: int

        from outbound.core.exceptions import InvalidResponseClassError

        with pytest.raises(InvalidResponseClassError):
            connector.send_async(list_users)

    def test_async_response_pipeline_error_rejects_future(self, connector, list_users):
        """Test errors raised by response middleware reject the future."""
        def explode(response):
            raise ValueError("bad response")

        connector.middleware.on_response(explode)

        with pytest.raises(ValueError, match="bad response"):
            connector.send_async(list_users).result(timeout=5)

    def test_async_delay(self, connector, list_users, fake_transport):
        """Test delayed async sends return before the transport is called."""
        list_users.delay.set(100)

        future = connector.send_async(list_users)

        assert fake_transport.call_count == 0
        assert future.result(timeout=5).status == 200
        assert fake_transport.call_count == 1
