"""
URL helpers.
"""

from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def is_absolute_url(url: str) -> bool:
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)


def join_url(base_url: str, endpoint: str) -> str:
    """
    Join a connector base URL and a request endpoint.

    An absolute endpoint replaces the base URL entirely.

    Example:
        >>> join_url("https://api.example.com/", "/users")
        'https://api.example.com/users'
    """
    if is_absolute_url(endpoint):
        return endpoint
    if not endpoint:
        return base_url
    if not base_url:
        return endpoint
    return f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"


def merge_query(url: str, query: Mapping[str, Any]) -> str:
    """
    Merge query parameters into a URL.

    Parameters already in the URL are kept; those in ``query`` win on key
    collision. Keys keep first-seen order.
    """
    parts = urlsplit(url)
    merged = dict(parse_qsl(parts.query, keep_blank_values=True))
    for key, value in query.items():
        merged[key] = _stringify(value)

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(merged, doseq=True), parts.fragment)
    )


def _stringify(value: Any) -> Any:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple)):
        return [_stringify(v) for v in value]
    return value
