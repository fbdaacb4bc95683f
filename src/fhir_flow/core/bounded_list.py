# ============================================================================
# src/fhir_flow/core/bounded_list.py
# ============================================================================
"""
Most-recent-first list with a fixed capacity.

Backed by a deque with maxlen: a push to the front drops the oldest entry
from the back in the same call, so the list never exceeds its capacity.
"""

from collections import deque
from typing import Deque, Generic, Iterable, Iterator, List, TypeVar

T = TypeVar("T")


class BoundedList(Generic[T]):

    def __init__(self, capacity: int, items: Iterable[T] = ()):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)
        # `items` is most-recent-first already; keep the newest
        self._items.extend(list(items)[:capacity])

    def push_front(self, item: T) -> None:
        self._items.appendleft(item)

    def push_front_many(self, items: Iterable[T]) -> None:
        """Prepend a batch so that items[0] ends up first."""
        self._items.extendleft(reversed(list(items)))

    def clear(self) -> None:
        self._items.clear()

    def head(self, n: int) -> List[T]:
        return list(self._items)[:n]

    def to_list(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __repr__(self) -> str:
        return f"BoundedList(capacity={self.capacity}, size={len(self._items)})"
