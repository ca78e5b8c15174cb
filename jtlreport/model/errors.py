"""Bounded samples of error details per request label."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Generic, Iterator, List, Tuple, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 3


class BoundedList(Generic[T]):
    """Append-only sequence that ignores appends once ``limit`` items are held."""

    __slots__ = ("_limit", "_items")

    def __init__(self, limit: int) -> None:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        self._limit = limit
        self._items: List[T] = []

    @property
    def limit(self) -> int:
        return self._limit

    def append(self, item: T) -> bool:
        """Append ``item`` if there is room; return whether it was kept."""
        if len(self._items) >= self._limit:
            return False
        self._items.append(item)
        return True

    def is_full(self) -> bool:
        return len(self._items) >= self._limit

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def to_tuple(self) -> Tuple[T, ...]:
        return tuple(self._items)


@dataclass(frozen=True)
class ErrorEntry:
    """Details of one failed request.

    Attributes:
        label: Request label.
        error_label: ``label`` or ``"label - code"``.
        error_code: Result code or assertion name.
        error_message: Response message or assertion failure message.
        timestamp: Time of the failed request.
    """

    label: str
    error_label: str
    error_code: str
    error_message: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "error_label": self.error_label,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "timestamp": self.timestamp.isoformat(),
        }


class ErrorCache:
    """Keeps the first ``capacity`` error entries of every label.

    Entries beyond capacity are dropped; earlier entries are never replaced.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.capacity = capacity
        self._entries: Dict[str, BoundedList[ErrorEntry]] = {}

    def record(self, label: str, entry: ErrorEntry) -> bool:
        """Keep ``entry`` under ``label`` if the label has room.

        Returns:
            True when kept, False when the label is already at capacity.
        """
        bucket = self._entries.get(label)
        if bucket is None:
            bucket = BoundedList(self.capacity)
            self._entries[label] = bucket
        return bucket.append(entry)

    def for_label(self, label: str) -> Tuple[ErrorEntry, ...]:
        """Entries kept for ``label`` in arrival order (possibly empty)."""
        bucket = self._entries.get(label)
        return bucket.to_tuple() if bucket is not None else ()

    def labels(self) -> List[str]:
        """Labels holding at least one entry, in first-seen order."""
        return [label for label, bucket in self._entries.items() if len(bucket)]

    def items(self) -> Iterator[Tuple[str, Tuple[ErrorEntry, ...]]]:
        for label in self.labels():
            yield label, self._entries[label].to_tuple()

    def merge(self, other: "ErrorCache") -> int:
        """Append ``other``'s entries after this cache's, subject to capacity.

        Returns:
            Number of ``other``'s entries that did not fit.
        """
        dropped = 0
        for label, entries in other.items():
            for i, entry in enumerate(entries):
                if not self.record(label, entry):
                    dropped += len(entries) - i
                    break
        return dropped

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {label: [e.to_dict() for e in entries] for label, entries in self.items()}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._entries.values())
