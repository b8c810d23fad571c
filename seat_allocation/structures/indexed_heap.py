"""Array-backed binary min-heap with a key -> position index.

The position index makes arbitrary removal and in-place reordering
O(log n). Every slot swap rewrites the index entries of both moved
elements before anything else reads them.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, Iterator, Optional, TypeVar

from seat_allocation.domain.models import WaitlistEntry


K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class HeapKeyError(KeyError):
    """Raised when a key is missing from, or already present in, the heap."""


class IndexedMinHeap(Generic[K, T]):
    """Min-heap ordered by ``order_key``; elements are addressed by ``key``.

    ``order_key`` must return values that compare with ``<``. Smaller order
    keys are served first.
    """

    def __init__(
        self,
        *,
        key: Callable[[T], K],
        order_key: Callable[[T], Any],
    ) -> None:
        self._key = key
        self._order_key = order_key
        self._items: list[T] = []
        self._positions: dict[K, int] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._positions

    def __iter__(self) -> Iterator[T]:
        """Iterate in storage order, not service order."""
        return iter(list(self._items))

    def size(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def keys(self) -> list[K]:
        return list(self._positions)

    def get(self, key: K) -> Optional[T]:
        position = self._positions.get(key)
        if position is None:
            return None
        return self._items[position]

    def push(self, item: T) -> None:
        item_key = self._key(item)
        if item_key in self._positions:
            raise HeapKeyError(f"key {item_key!r} is already queued")
        self._items.append(item)
        position = len(self._items) - 1
        self._positions[item_key] = position
        self._sift_up(position)

    def peek(self) -> T:
        if not self._items:
            raise IndexError("peek from an empty heap")
        return self._items[0]

    def pop(self) -> T:
        if not self._items:
            raise IndexError("pop from an empty heap")
        return self._remove_at(0)

    def remove(self, key: K) -> T:
        position = self._positions.get(key)
        if position is None:
            raise HeapKeyError(key)
        return self._remove_at(position)

    def update(self, key: K, transform: Callable[[T], T]) -> T:
        """Replace the element under ``key`` with ``transform(element)`` and resift.

        The replacement must keep the same key.
        """
        position = self._positions.get(key)
        if position is None:
            raise HeapKeyError(key)
        current = self._items[position]
        replacement = transform(current)
        if self._key(replacement) != key:
            raise HeapKeyError(f"update must keep key {key!r}")
        self._items[position] = replacement
        if self._order_key(replacement) < self._order_key(current):
            self._sift_up(position)
        else:
            self._sift_down(position)
        return replacement

    def ordered(self) -> list[T]:
        """Return every element in service order without mutating the heap."""
        return sorted(self._items, key=self._order_key)

    def _remove_at(self, position: int) -> T:
        last = len(self._items) - 1
        if position != last:
            self._swap(position, last)
        removed = self._items.pop()
        del self._positions[self._key(removed)]
        if position < len(self._items):
            parent = (position - 1) // 2
            if position > 0 and self._before(position, parent):
                self._sift_up(position)
            else:
                self._sift_down(position)
        return removed

    def _before(self, left: int, right: int) -> bool:
        return self._order_key(self._items[left]) < self._order_key(self._items[right])

    def _swap(self, left: int, right: int) -> None:
        items = self._items
        items[left], items[right] = items[right], items[left]
        self._positions[self._key(items[left])] = left
        self._positions[self._key(items[right])] = right

    def _sift_up(self, position: int) -> None:
        while position > 0:
            parent = (position - 1) // 2
            if not self._before(position, parent):
                break
            self._swap(position, parent)
            position = parent

    def _sift_down(self, position: int) -> None:
        size = len(self._items)
        while True:
            smallest = position
            left = 2 * position + 1
            right = left + 1
            if left < size and self._before(left, smallest):
                smallest = left
            if right < size and self._before(right, smallest):
                smallest = right
            if smallest == position:
                return
            self._swap(position, smallest)
            position = smallest


def _identity(value: int) -> int:
    return value


def _entry_user(entry: WaitlistEntry) -> int:
    return entry.user_id


def _entry_order(entry: WaitlistEntry) -> tuple[int, int]:
    return entry.service_order


def seat_pool() -> IndexedMinHeap[int, int]:
    """Free seat numbers, lowest first."""
    return IndexedMinHeap(key=_identity, order_key=_identity)


def waitlist() -> IndexedMinHeap[int, WaitlistEntry]:
    """Waiting users, highest priority first, then earliest arrival."""
    return IndexedMinHeap(key=_entry_user, order_key=_entry_order)
