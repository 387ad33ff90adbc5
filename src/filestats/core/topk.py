"""Bounded top-K tracker.

Keeps the K most preferred items of a stream in a binary heap whose root is
the least preferred retained item, so every offer costs O(log K) and memory
never grows beyond K entries.
"""

import heapq
import itertools
from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 10


class TopK(Generic[T]):
    """Fixed-capacity collection of the K most preferred items seen so far.

    Preference is decided by ``key(item)``: with ``largest=True`` greater keys
    are preferred (size or time descending), with ``largest=False`` smaller
    keys are preferred (time ascending). On equal keys the item offered first
    is preferred.

    Args:
        capacity: Maximum number of retained items.
        key: Function returning the numeric ordering key of an item.
        largest: Whether greater keys are preferred.
    """

    def __init__(
        self,
        capacity: int,
        key: Callable[[T], Any],
        largest: bool = True,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._key = key
        self._largest = largest
        # Entries are (rank, -sequence, item); the heap root is the least preferred.
        self._heap: list[tuple[Any, int, T]] = []
        self._counter = itertools.count()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def largest(self) -> bool:
        return self._largest

    def _rank(self, item: T) -> Any:
        value = self._key(item)
        return value if self._largest else -value

    def offer(self, item: T) -> None:
        """Offer an item, evicting the least preferred one when over capacity."""
        entry = (self._rank(item), -next(self._counter), item)
        if len(self._heap) < self._capacity:
            heapq.heappush(self._heap, entry)
        elif entry[:2] > self._heap[0][:2]:
            heapq.heapreplace(self._heap, entry)

    def sorted(self) -> list[T]:
        """Return the retained items, most preferred first."""
        ordered = sorted(self._heap, key=lambda e: e[:2], reverse=True)
        return [item for _, _, item in ordered]

    def merge(self, other: "TopK[T]") -> None:
        """Offer every item retained by ``other`` to this tracker."""
        for item in other.sorted():
            self.offer(item)

    def __len__(self) -> int:
        return len(self._heap)

    def __iter__(self) -> Iterator[T]:
        """Iterate retained items in no particular order."""
        return (item for _, _, item in self._heap)

    def __repr__(self) -> str:
        return (
            f"TopK(capacity={self._capacity}, largest={self._largest}, "
            f"size={len(self._heap)})"
        )
