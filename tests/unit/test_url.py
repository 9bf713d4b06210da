"""
Unit tests for URL helpers.
"""

import pytest

from outbound.http.url import is_absolute_url, join_url, merge_query


class TestUrlHelpers:
    """Tests for join_url and merge_query."""

    @pytest.mark.parametrize("base,endpoint,expected", [
        ("https://api.example.com", "/users", "https://api.example.com/users"),
        ("https://api.example.com/", "users", "https://api.example.com/users"),
        ("https://api.example.com/v1/", "/users/1", "https://api.example.com/v1/users/1"),
        ("https://api.example.com", "", "https://api.example.com"),
        ("https://api.example.com", "https://other.example.com/x", "https://other.example.com/x"),
    ])
    def test_join_url(self, base, endpoint, expected):
        """Test base URL and endpoint joining."""
        assert join_url(base, endpoint) == expected

    def test_is_absolute_url(self):
        """Test absolute URL detection."""
        assert is_absolute_url("http://localhost:8080/")
        assert not is_absolute_url("/users")

    def test_merge_query_keeps_existing_parameters(self):
        """Test existing parameters are kept and new ones win on collision."""
        url = merge_query("https://api.example.com/users?sort=name&page=1", {"page": 2, "active": True})

        assert url == "https://api.example.com/users?sort=name&page=2&active=1"

    def test_merge_query_lists(self):
        """Test list values become repeated parameters."""
        assert merge_query("https://x.test/a", {"id": [1, 2]}) == "https://x.test/a?id=1&id=2"
