"""
Unit tests for the request paginators.
"""

import pickle
from urllib.parse import parse_qs, urlsplit

import pytest

from outbound.core.exceptions import PaginatorError
from outbound.http.connector import Connector
from outbound.http.request import Request
from outbound.pagination import CursorPaginator, OffsetPaginator, PagedPaginator


ITEMS = [{"id": i} for i in range(1, 8)]


class ItemsConnector(Connector):
    def resolve_base_url(self) -> str:
        return "https://api.example.com"


class ListItems(Request):
    def resolve_endpoint(self) -> str:
        return "/items"


def query_of(message) -> dict:
    return {key: values[0] for key, values in parse_qs(urlsplit(message.url).query).items()}


@pytest.fixture
def items_connector(fake_transport, raw_response):
    """Fixture providing a connector backed by a fake paged items API (7 items)."""
    def responder(message):
        query = query_of(message)
        if "offset" in query:
            start, size = int(query["offset"]), int(query["limit"])
        else:
            size = int(query.get("per_page", 3))
            start = (int(query.get("page", 1)) - 1) * size
        return raw_response(200, {
            "data": ITEMS[start:start + size],
            "meta": {"last_page": 3, "total": len(ITEMS)},
        })

    fake_transport.responder = responder
    return ItemsConnector().with_transport(fake_transport)


def pages_requested(transport) -> list:
    return [query_of(message).get("page") for message in transport.messages]


class TestPagedPaginator:
    """Tests for page-number pagination."""

    def test_iterates_until_short_page(self, items_connector, fake_transport):
        """Test iteration stops at the first page shorter than per_page."""
        paginator = items_connector.paginate(ListItems(), per_page=3)

        responses = list(paginator)

        assert len(responses) == 3
        assert pages_requested(fake_transport) == ["1", "2", "3"]
        assert query_of(fake_transport.messages[0])["per_page"] == "3"

    def test_items(self, items_connector):
        """Test items() flattens every page."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3)

        assert [item["id"] for item in paginator.items()] == list(range(1, 8))

    def test_total_pages_resolver(self, items_connector, fake_transport):
        """Test the total page count ends iteration."""
        paginator = PagedPaginator(
            items_connector, ListItems(),
            total_pages_resolver=lambda response: response.json("meta.last_page"),
        )

        assert len(list(paginator)) == 3
        assert paginator.current_index == 2

    def test_has_next_resolver(self, items_connector, fake_transport):
        """Test has_next_resolver takes precedence."""
        paginator = PagedPaginator(
            items_connector, ListItems(), per_page=3,
            has_next_resolver=lambda response: False,
        )

        assert len(list(paginator)) == 1

    def test_original_request_untouched(self, items_connector):
        """Test pages are clones of the original request."""
        original = ListItems()

        list(PagedPaginator(items_connector, original, per_page=3))

        assert original.query.all() == {}

    def test_limit_and_resume(self, items_connector, fake_transport):
        """Test a new loop resumes after the last fetched page."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3, limit=2)

        assert len(list(paginator)) == 2
        assert len(list(paginator)) == 1
        assert list(paginator) == []
        assert pages_requested(fake_transport) == ["1", "2", "3"]

    def test_restart_when_not_continuing(self, items_connector, fake_transport):
        """Test every loop restarts from the first page when not continuing."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3, limit=2)
        paginator.continue_on_new_loop = False

        list(paginator)
        list(paginator)

        assert pages_requested(fake_transport) == ["1", "2", "1", "2"]

    def test_rewind_keeps_position_when_continuing(self, items_connector):
        """Test rewind() keeps the last response when continuing."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3, limit=1)
        list(paginator)
        last = paginator.last_response

        paginator.rewind()

        assert last is not None
        assert paginator.last_response is last
        assert paginator.current_index == 0

    def test_rewind_clears_position_when_not_continuing(self, items_connector):
        """Test rewind() clears the last response when not continuing."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3, limit=1)
        paginator.continue_on_new_loop = False
        list(paginator)
        assert paginator.last_response is not None

        paginator.rewind()

        assert paginator.last_response is None
        assert paginator.current_index == -1

    def test_invalid_limit(self, items_connector):
        """Test limits below one are rejected."""
        with pytest.raises(PaginatorError):
            PagedPaginator(items_connector, ListItems(), limit=0)

    def test_count(self, items_connector, fake_transport):
        """Test count() does not advance iteration."""
        paginator = PagedPaginator(
            items_connector, ListItems(),
            total_pages_resolver=lambda response: response.json("meta.last_page"),
        )

        assert paginator.count() == 3
        assert fake_transport.call_count == 1

        responses = list(paginator)
        assert len(responses) == 3
        assert pages_requested(fake_transport) == ["1", "1", "2", "3"]
        assert paginator.count() == 3
        assert fake_transport.call_count == 4

    def test_count_unknown_total(self, items_connector):
        """Test count() fails when the total cannot be determined."""
        with pytest.raises(PaginatorError):
            PagedPaginator(items_connector, ListItems(), per_page=3).count()


class TestAsyncPagination:
    """Tests for asynchronous pagination."""

    def test_async_yields_futures(self, items_connector, fake_transport):
        """Test asynchronous iteration yields futures resolving to responses."""
        paginator = PagedPaginator(items_connector, ListItems(), per_page=3).set_async()

        futures = list(paginator)

        assert len(futures) == 3
        assert [len(future.result(timeout=5).json("data")) for future in futures] == [3, 3, 1]

    def test_async_prefetches_known_total(self, items_connector, fake_transport):
        """Test the remaining pages are sent together once the total is known."""
        paginator = PagedPaginator(
            items_connector, ListItems(),
            total_pages_resolver=lambda response: response.json("meta.last_page"),
        ).set_async()

        futures = list(paginator)
        for future in futures:
            future.result(timeout=5)

        assert sorted(pages_requested(fake_transport)) == ["1", "2", "3"]

    def test_async_prefetch_respects_limit(self, items_connector, fake_transport):
        """Test prefetching never exceeds the per-loop limit."""
        paginator = PagedPaginator(
            items_connector, ListItems(), limit=2,
            total_pages_resolver=lambda response: response.json("meta.last_page"),
        ).set_async()

        futures = list(paginator)
        for future in futures:
            future.result(timeout=5)

        assert len(futures) == 2

    def test_items_requires_sync(self, items_connector):
        """Test items() is rejected in asynchronous mode."""
        paginator = PagedPaginator(items_connector, ListItems()).set_async()

        with pytest.raises(PaginatorError):
            list(paginator.items())

    def test_pool(self, items_connector, fake_transport):
        """Test pages can be fetched through a pool."""
        statuses = []
        paginator = PagedPaginator(
            items_connector, ListItems(),
            total_pages_resolver=lambda response: response.json("meta.last_page"),
        )

        settled = paginator.pool(concurrency=2, response_handler=lambda response, key: statuses.append(response.status)).wait(timeout=10)

        assert settled == 3
        assert statuses == [200, 200, 200]
        assert paginator.is_async()

    def test_pool_respects_concurrency(self, items_connector, fake_transport):
        """Test prefetched pages never exceed the pool concurrency."""
        fake_transport.latency = 0.05
        paginator = PagedPaginator(
            items_connector, ListItems(),
            total_pages_resolver=lambda response: 10,
        )

        settled = paginator.pool(concurrency=3).wait(timeout=10)

        assert settled == 10
        assert fake_transport.call_count == 10
        assert fake_transport.max_active <= 3


class TestOffsetPaginator:
    """Tests for offset pagination."""

    def test_offsets(self, items_connector, fake_transport):
        """Test offsets advance by per_page until a short page."""
        paginator = OffsetPaginator(items_connector, ListItems(), per_page=3)

        assert [item["id"] for item in paginator.items()] == list(range(1, 8))
        assert [query_of(m)["offset"] for m in fake_transport.messages] == ["0", "3", "6"]
        assert {query_of(m)["limit"] for m in fake_transport.messages} == {"3"}

    def test_total_items_resolver(self, items_connector):
        """Test the page count is derived from the item total."""
        paginator = OffsetPaginator(
            items_connector, ListItems(), per_page=2,
            total_items_resolver=lambda response: response.json("meta.total"),
        )

        assert paginator.count() == 4
        assert len(list(paginator)) == 4

    def test_invalid_per_page(self, items_connector):
        """Test per_page must be positive."""
        with pytest.raises(PaginatorError):
            OffsetPaginator(items_connector, ListItems(), per_page=0)


class TestCursorPaginator:
    """Tests for cursor pagination."""

    @staticmethod
    def cursor_api(fake_transport, raw_response, pages):
        def responder(message):
            cursor = query_of(message).get("cursor")
            data, next_cursor = pages[cursor]
            return raw_response(200, {"data": data, "next_cursor": next_cursor})

        fake_transport.responder = responder
        return ItemsConnector().with_transport(fake_transport)

    def test_follows_cursors(self, fake_transport, raw_response):
        """Test each page requests the cursor of the previous one."""
        connector = self.cursor_api(fake_transport, raw_response, {
            None: ([1, 2], "c2"),
            "c2": ([3, 4], "c3"),
            "c3": ([5], None),
        })

        paginator = CursorPaginator(connector, ListItems())

        assert list(paginator.items()) == [1, 2, 3, 4, 5]
        assert [query_of(m).get("cursor") for m in fake_transport.messages] == [None, "c2", "c3"]

    def test_repeated_cursor_stops(self, fake_transport, raw_response):
        """Test a repeating cursor ends iteration."""
        connector = self.cursor_api(fake_transport, raw_response, {
            None: ([1], "c2"),
            "c2": ([2], "c2"),
        })

        assert len(list(CursorPaginator(connector, ListItems()))) == 2

    def test_restart_clears_seen_cursors(self, fake_transport, raw_response):
        """Test restarting from the first page forgets seen cursors."""
        connector = self.cursor_api(fake_transport, raw_response, {
            None: ([1], "c2"),
            "c2": ([2], None),
        })
        paginator = CursorPaginator(connector, ListItems())
        paginator.continue_on_new_loop = False

        assert len(list(paginator)) == 2
        assert len(list(paginator)) == 2


class TestSerialisation:
    """Tests for to_dict/from_dict and pickling."""

    def test_to_dict_round_trip(self, items_connector):
        """Test from_dict rebuilds a paginator from to_dict output."""
        paginator = PagedPaginator(items_connector, ListItems(), limit=5)
        paginator.continue_on_new_loop = False

        data = paginator.to_dict()
        restored = PagedPaginator.from_dict(data, per_page=10)

        assert set(data) == {"connector", "original_request", "limit", "continue_on_new_loop"}
        assert restored.connector is items_connector
        assert restored.limit == 5
        assert restored.per_page == 10
        assert restored.continue_on_new_loop is False

    def test_from_dict_requires_connector_and_request(self):
        """Test incomplete data is rejected."""
        with pytest.raises(PaginatorError):
            PagedPaginator.from_dict({"limit": 1})

    def test_pickle_drops_runtime_state(self, items_connector):
        """Test pickling keeps configuration and drops resolvers and position."""
        paginator = PagedPaginator(
            items_connector, ListItems(), per_page=3, limit=1,
            total_pages_resolver=lambda response: 3,
        )
        paginator.continue_on_new_loop = False
        list(paginator)

        restored = pickle.loads(pickle.dumps(paginator))

        assert restored.per_page == 3
        assert restored.limit == 1
        assert restored.continue_on_new_loop is False
        assert restored.total_pages_resolver is None
        assert restored.last_response is None
        assert restored.current_index == -1
        assert isinstance(restored.original_request, ListItems)
