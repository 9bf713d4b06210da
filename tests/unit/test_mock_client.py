"""
Unit tests for MockClient and MockResponse.
"""

import pickle

import pytest

from outbound.core.exceptions import MockAssertionError, NoMockResponseFoundError
from outbound.http.request import Request
from outbound.mocking.mock_client import MockClient, MockResponse


class GetUser(Request):
    def __init__(self, user_id: int = 1):
        self.user_id = user_id

    def resolve_endpoint(self) -> str:
        return f"/users/{self.user_id}"


class GetOrders(Request):
    def resolve_endpoint(self) -> str:
        return "/orders"


class TestMockResponse:
    """Tests for MockResponse."""

    def test_json_body_gets_content_type(self):
        """Test dict bodies are JSON encoded with a JSON content type."""
        response = MockResponse({"id": 1}, 201)

        assert response.status == 201
        assert response.headers["Content-Type"] == "application/json"
        assert response.body_bytes() == b'{"id": 1}'

    def test_explicit_content_type_kept(self):
        """Test a given Content-Type is not overwritten."""
        response = MockResponse([1], headers={"content-type": "application/vnd.api+json"})

        assert "Content-Type" not in response.headers
        assert response.headers["content-type"] == "application/vnd.api+json"

    def test_string_body(self):
        """Test string bodies are UTF-8 encoded."""
        assert MockResponse.make("plain").body_bytes() == b"plain"

    def test_throw_with_factory(self):
        """Test exception factories receive the pending request."""
        response = MockResponse().throw(lambda pending: ConnectionError(f"failed {pending}"))

        exception = response.get_exception("pending")

        assert isinstance(exception, ConnectionError)
        assert str(exception) == "failed pending"


class TestMockClient:
    """Tests for MockClient."""

    def test_sequence_consumed_in_order(self, connector):
        """Test sequence responses are returned in order."""
        mock_client = MockClient([MockResponse({"n": 1}), MockResponse({"n": 2})])

        first = connector.send(GetUser(), mock_client)
        second = connector.send(GetUser(), mock_client)

        assert [first.json("n"), second.json("n")] == [1, 2]
        assert mock_client.is_empty()

    def test_empty_sequence_raises(self, connector, fake_transport):
        """Test an exhausted mock client fails resolution."""
        with pytest.raises(NoMockResponseFoundError):
            connector.send(GetUser(), MockClient([]))

        assert fake_transport.call_count == 0

    def test_keyed_by_request_class(self, connector):
        """Test responses keyed by request class match instances of that class."""
        mock_client = MockClient({
            GetUser: MockResponse({"kind": "user"}),
            GetOrders: MockResponse({"kind": "orders"}),
        })

        assert connector.send(GetOrders(), mock_client).json("kind") == "orders"
        assert connector.send(GetUser(), mock_client).json("kind") == "user"
        assert connector.send(GetUser(), mock_client).json("kind") == "user"

    def test_keyed_by_connector_class(self, connector):
        """Test responses keyed by connector class."""
        mock_client = MockClient({type(connector): MockResponse({"kind": "connector"})})

        assert connector.send(GetOrders(), mock_client).json("kind") == "connector"

    def test_keyed_by_url_pattern(self, connector):
        """Test responses keyed by a URL wildcard."""
        mock_client = MockClient({"*/users/*": MockResponse({"kind": "wildcard"})})

        assert connector.send(GetUser(42), mock_client).json("kind") == "wildcard"
        with pytest.raises(NoMockResponseFoundError):
            connector.send(GetOrders(), mock_client)

    def test_callable_response(self, connector):
        """Test callables receive the pending request."""
        mock_client = MockClient([lambda pending: MockResponse({"url": pending.url})])

        response = connector.send(GetUser(7), mock_client)

        assert response.json("url") == "https://api.example.com/users/7"

    def test_callable_must_return_payload(self, connector):
        """Test a callable returning something else raises TypeError."""
        mock_client = MockClient([lambda pending: {"not": "a payload"}])

        with pytest.raises(TypeError):
            connector.send(GetUser(), mock_client)

    def test_recording(self, connector):
        """Test responses are recorded for later inspection."""
        mock_client = MockClient([MockResponse(), MockResponse()])
        user = GetUser(3)
        connector.send(GetOrders(), mock_client)
        connector.send(user, mock_client)

        assert len(mock_client.recorded_responses()) == 2
        assert mock_client.last_request() is user
        assert mock_client.last_pending_request().url == "https://api.example.com/users/3"
        assert [type(r) for r in mock_client.recorded_requests()] == [GetOrders, GetUser]

    def test_assertions(self, connector):
        """Test assertion helpers pass and fail as expected."""
        mock_client = MockClient([MockResponse(status=204)])
        mock_client.assert_nothing_sent()

        connector.send(GetUser(5), mock_client)

        mock_client.assert_sent(GetUser)
        mock_client.assert_sent("*/users/5")
        mock_client.assert_sent(lambda request, response: response.status == 204)
        mock_client.assert_not_sent(GetOrders)
        mock_client.assert_sent_count(1)

        with pytest.raises(MockAssertionError):
            mock_client.assert_sent(GetOrders)
        with pytest.raises(AssertionError):
            mock_client.assert_sent_count(2)

    def test_pickle_recreates_lock(self):
        """Test a mock client survives pickling."""
        mock_client = MockClient([MockResponse({"a": 1})])

        restored = pickle.loads(pickle.dumps(mock_client))

        assert not restored.is_empty()
        restored.add_response(MockResponse())
