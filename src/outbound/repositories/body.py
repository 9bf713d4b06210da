"""
Body repositories for connectors, requests and pending requests.

Three kinds of body exist:
- Array-like (JSON, form): key/value, mergeable
- Opaque (string, stream): atomic payloads, never merged
- Multipart: mergeable by part name, needs a multipart body factory
  before it can be materialised
"""

import copy
import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from urllib.parse import urlencode

from urllib3.fields import RequestField

from ..core.exceptions import PendingRequestError
from .stores import LockableMixin


class BodyRepository(LockableMixin, ABC):
    """
    Abstract base class for all request bodies.

    Body repositories are cloned into the PendingRequest, so the connector
    and request bodies are never modified by resolution.
    """

    _label = "body"

    @abstractmethod
    def all(self) -> Any:
        """Return the raw body value."""
        pass

    @abstractmethod
    def set(self, value: Any) -> "BodyRepository":
        """Replace the body value."""
        pass

    @abstractmethod
    def is_empty(self) -> bool:
        pass

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    @abstractmethod
    def is_mergeable(self) -> bool:
        pass

    @abstractmethod
    def to_stream(self) -> Union[bytes, Any]:
        """Materialise the body into something the transport can send."""
        pass

    def clone(self) -> "BodyRepository":
        """Unlocked deep copy of this repository."""
        cloned = copy.copy(self)
        cloned._locked = False
        cloned._copy_state_from(self)
        return cloned

    def _copy_state_from(self, other: "BodyRepository") -> None:
        pass


class ArrayBodyRepository(BodyRepository):
    """Key/value body. Mergeable; later values win on key collision."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._locked = False
        self._data: Dict[str, Any] = dict(data or {})

    def all(self) -> Dict[str, Any]:
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, value: Mapping[str, Any]) -> "ArrayBodyRepository":
        self._ensure_unlocked()
        if not isinstance(value, Mapping):
            raise TypeError(f"{type(self).__name__} expects a mapping, got {type(value).__name__}")
        self._data = dict(value)
        return self

    def add(self, key: str, value: Any) -> "ArrayBodyRepository":
        self._ensure_unlocked()
        self._data[key] = value
        return self

    def remove(self, key: str) -> "ArrayBodyRepository":
        self._ensure_unlocked()
        self._data.pop(key, None)
        return self

    def merge(self, *mappings: Mapping[str, Any]) -> "ArrayBodyRepository":
        self._ensure_unlocked()
        for mapping in mappings:
            self._data.update(mapping)
        return self

    def is_empty(self) -> bool:
        return not self._data

    def is_mergeable(self) -> bool:
        return True

    def to_stream(self) -> bytes:
        return json.dumps(self._data).encode("utf-8")

    def _copy_state_from(self, other: "ArrayBodyRepository") -> None:
        self._data = copy.deepcopy(other._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


class JsonBodyRepository(ArrayBodyRepository):
    """JSON object body."""

    def to_stream(self) -> bytes:
        return json.dumps(self._data, ensure_ascii=False).encode("utf-8")


class FormBodyRepository(ArrayBodyRepository):
    """application/x-www-form-urlencoded body."""

    def to_stream(self) -> bytes:
        return urlencode(self._data, doseq=True).encode("utf-8")


class StringBodyRepository(BodyRepository):
    """Opaque text or bytes body."""

    def __init__(self, value: Optional[Union[str, bytes]] = None):
        self._locked = False
        self._value = value

    def all(self) -> Optional[Union[str, bytes]]:
        return self._value

    def set(self, value: Optional[Union[str, bytes]]) -> "StringBodyRepository":
        self._ensure_unlocked()
        self._value = value
        return self

    def is_empty(self) -> bool:
        return not self._value

    def is_mergeable(self) -> bool:
        return False

    def to_stream(self) -> bytes:
        if self._value is None:
            return b""
        if isinstance(self._value, bytes):
            return self._value
        return self._value.encode("utf-8")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class StreamBodyRepository(BodyRepository):
    """
    Opaque stream body (file-like object or iterator of bytes).

    Clones share the underlying stream; a stream can only be sent once.
    """

    def __init__(self, stream: Any = None):
        self._locked = False
        self._stream = stream

    def all(self) -> Any:
        return self._stream

    def set(self, stream: Any) -> "StreamBodyRepository":
        self._ensure_unlocked()
        self._stream = stream
        return self

    def is_empty(self) -> bool:
        return self._stream is None

    def is_mergeable(self) -> bool:
        return False

    def to_stream(self) -> Any:
        return self._stream


@dataclass
class MultipartValue:
    """
    A single part of a multipart body.

    Attributes:
        name: Form field name
        value: Part content
        filename: Optional filename (marks the part as a file upload)
        headers: Extra part headers (e.g. Content-Type)
    """
    name: str
    value: Union[str, bytes]
    filename: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)

    def to_field(self) -> RequestField:
        request_field = RequestField(
            name=self.name,
            data=self.value,
            filename=self.filename,
            headers=dict(self.headers) or None,
        )
        request_field.make_multipart(
            content_type=self.headers.get("Content-Type"),
        )
        return request_field


class MultipartBodyRepository(BodyRepository):
    """
    Multipart body keyed by part name.

    Mergeable. The multipart body factory is injected during resolution;
    to_stream() fails without it.
    """

    def __init__(
        self,
        parts: Optional[Iterable[MultipartValue]] = None,
        boundary: Optional[str] = None,
    ):
        self._locked = False
        self._parts: Dict[str, MultipartValue] = {}
        self.boundary = boundary or uuid.uuid4().hex
        self._factory = None
        for part in parts or []:
            self._parts[part.name] = part

    def all(self) -> List[MultipartValue]:
        return list(self._parts.values())

    def get(self, name: str) -> Optional[MultipartValue]:
        return self._parts.get(name)

    def set(self, parts: Iterable[MultipartValue]) -> "MultipartBodyRepository":
        self._ensure_unlocked()
        self._parts = {}
        for part in parts:
            self._parts[part.name] = part
        return self

    def add(
        self,
        name: str,
        value: Union[str, bytes],
        filename: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> "MultipartBodyRepository":
        self._ensure_unlocked()
        self._parts[name] = MultipartValue(name, value, filename, dict(headers or {}))
        return self

    def remove(self, name: str) -> "MultipartBodyRepository":
        self._ensure_unlocked()
        self._parts.pop(name, None)
        return self

    def merge(self, *part_lists: Iterable[MultipartValue]) -> "MultipartBodyRepository":
        self._ensure_unlocked()
        for parts in part_lists:
            for part in parts:
                self._parts[part.name] = part
        return self

    def is_empty(self) -> bool:
        return not self._parts

    def is_mergeable(self) -> bool:
        return True

    def set_multipart_body_factory(self, factory) -> "MultipartBodyRepository":
        self._factory = factory
        return self

    @property
    def multipart_body_factory(self):
        return self._factory

    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def to_stream(self) -> bytes:
        if self._factory is None:
            raise PendingRequestError(
                "A multipart body factory must be set before the body can be materialised"
            )
        fields = [part.to_field() for part in self._parts.values()]
        body, _content_type = self._factory(fields, self.boundary)
        return body

    def _copy_state_from(self, other: "MultipartBodyRepository") -> None:
        self._parts = dict(other._parts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._parts)!r})"
