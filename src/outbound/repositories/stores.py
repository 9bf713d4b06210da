"""
Key/value and delay stores used for headers, query parameters and config.
"""

from typing import Any, Dict, Iterator, Mapping, Optional

from ..core.exceptions import PendingRequestFrozenError


class LockableMixin:
    """Shared lock handling for stores owned by a ready PendingRequest."""

    _locked: bool = False
    _label: str = "store"

    def lock(self) -> None:
        """Reject all further mutation."""
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    @property
    def is_locked(self) -> bool:
        return self._locked

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise PendingRequestFrozenError(
                f"Cannot modify {self._label} after the PendingRequest is ready"
            )


class ArrayStore(LockableMixin):
    """
    Ordered key/value store.

    Later writes to an existing key overwrite the value but keep the key's
    original position.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, label: str = "store"):
        self._data: Dict[str, Any] = dict(data or {})
        self._label = label
        self._locked = False

    def all(self) -> Dict[str, Any]:
        """Return a copy of every entry."""
        return dict(self._data)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def add(self, key: str, value: Any) -> "ArrayStore":
        self._ensure_unlocked()
        self._data[key] = value
        return self

    def merge(self, *mappings: Mapping[str, Any]) -> "ArrayStore":
        """Merge mappings in order; later mappings win on key collision."""
        self._ensure_unlocked()
        for mapping in mappings:
            self._data.update(mapping)
        return self

    def set(self, data: Mapping[str, Any]) -> "ArrayStore":
        """Replace every entry."""
        self._ensure_unlocked()
        self._data = dict(data)
        return self

    def remove(self, key: str) -> "ArrayStore":
        self._ensure_unlocked()
        self._data.pop(key, None)
        return self

    def is_empty(self) -> bool:
        return not self._data

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    def clone(self) -> "ArrayStore":
        """Unlocked copy of this store."""
        return ArrayStore(self._data, label=self._label)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ArrayStore({self._data!r})"


class DelayStore(LockableMixin):
    """
    Optional delay in milliseconds.

    None means no delay is configured, which is distinct from a delay of 0.
    """

    def __init__(self, milliseconds: Optional[int] = None):
        self._milliseconds = milliseconds
        self._label = "delay"
        self._locked = False

    def get(self) -> Optional[int]:
        return self._milliseconds

    def set(self, milliseconds: Optional[int]) -> "DelayStore":
        self._ensure_unlocked()
        if milliseconds is not None and milliseconds < 0:
            raise ValueError(f"Delay cannot be negative: {milliseconds}")
        self._milliseconds = milliseconds
        return self

    def is_empty(self) -> bool:
        return self._milliseconds is None

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    def clone(self) -> "DelayStore":
        return DelayStore(self._milliseconds)

    def __repr__(self) -> str:
        return f"DelayStore({self._milliseconds!r})"
