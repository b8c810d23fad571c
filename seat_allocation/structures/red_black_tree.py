"""Red-black tree mapping user ids to reserved seat ids.

Nodes live in a flat arena and refer to each other by integer slot, so a
rotation only reassigns indices. Freed slots are recycled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from seat_allocation.domain.models import Reservation


RED = True
BLACK = False


class ReservationIndexError(Exception):
    """Raised on a duplicate insert or a delete of an absent user."""


@dataclass
class _Node:
    user_id: int
    seat_id: int
    color: bool = RED
    left: Optional[int] = None
    right: Optional[int] = None
    parent: Optional[int] = None


class ReservationIndex:
    """Balanced index of reservations keyed by user id."""

    def __init__(self) -> None:
        self._nodes: list[_Node] = []
        self._free: list[int] = []
        self._root: Optional[int] = None
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __contains__(self, user_id: object) -> bool:
        return isinstance(user_id, int) and self._locate(user_id) is not None

    def __iter__(self) -> Iterator[Reservation]:
        """Iterate reservations in ascending user id order."""
        return iter(self._in_order(None, None))

    def find(self, user_id: int) -> Optional[int]:
        node = self._locate(user_id)
        if node is None:
            return None
        return self._nodes[node].seat_id

    def insert(self, user_id: int, seat_id: int) -> None:
        parent: Optional[int] = None
        current = self._root
        while current is not None:
            parent = current
            node = self._nodes[current]
            if user_id < node.user_id:
                current = node.left
            elif user_id > node.user_id:
                current = node.right
            else:
                raise ReservationIndexError(f"user {user_id} already holds seat {node.seat_id}")

        created = self._allocate(user_id, seat_id, parent)
        if parent is None:
            self._root = created
        elif user_id < self._nodes[parent].user_id:
            self._nodes[parent].left = created
        else:
            self._nodes[parent].right = created
        self._size += 1
        self._fix_insert(created)

    def delete(self, user_id: int) -> int:
        """Remove the reservation for ``user_id`` and return its seat id."""
        target = self._locate(user_id)
        if target is None:
            raise ReservationIndexError(f"user {user_id} holds no reservation")
        seat_id = self._nodes[target].seat_id

        node = self._nodes[target]
        if node.left is not None and node.right is not None:
            successor = self._minimum(node.right)
            node.user_id = self._nodes[successor].user_id
            node.seat_id = self._nodes[successor].seat_id
            target = successor

        removed = self._nodes[target]
        child = removed.left if removed.left is not None else removed.right
        if child is not None:
            # A node with a single child is black and the child is a red leaf.
            self._replace(target, child)
            self._nodes[child].color = BLACK
        elif target == self._root:
            self._root = None
        else:
            if removed.color == BLACK:
                self._fix_double_black(target)
            self._detach_leaf(target)

        self._release(target)
        self._size -= 1
        return seat_id

    def enumerate_by_seat(self) -> list[Reservation]:
        return sorted(self._in_order(None, None), key=lambda item: item.seat_id)

    def user_ids_between(self, low: int, high: int) -> list[int]:
        """Return user ids within ``[low, high]`` in ascending order."""
        return [item.user_id for item in self._in_order(low, high)]

    def _in_order(self, low: Optional[int], high: Optional[int]) -> list[Reservation]:
        result: list[Reservation] = []
        stack: list[int] = []
        current = self._root
        while stack or current is not None:
            if current is not None:
                node = self._nodes[current]
                if low is not None and node.user_id < low:
                    # Node and its left subtree are below the range.
                    current = node.right
                    continue
                stack.append(current)
                current = node.left
                continue
            node = self._nodes[stack.pop()]
            if high is not None and node.user_id > high:
                break
            result.append(Reservation(user_id=node.user_id, seat_id=node.seat_id))
            current = node.right
        return result

    def _locate(self, user_id: int) -> Optional[int]:
        current = self._root
        while current is not None:
            node = self._nodes[current]
            if user_id < node.user_id:
                current = node.left
            elif user_id > node.user_id:
                current = node.right
            else:
                return current
        return None

    def _allocate(self, user_id: int, seat_id: int, parent: Optional[int]) -> int:
        node = _Node(user_id=user_id, seat_id=seat_id, parent=parent)
        if self._free:
            slot = self._free.pop()
            self._nodes[slot] = node
            return slot
        self._nodes.append(node)
        return len(self._nodes) - 1

    def _release(self, slot: int) -> None:
        node = self._nodes[slot]
        node.left = node.right = node.parent = None
        self._free.append(slot)

    def _color(self, slot: Optional[int]) -> bool:
        if slot is None:
            return BLACK
        return self._nodes[slot].color

    def _minimum(self, slot: int) -> int:
        while self._nodes[slot].left is not None:
            slot = self._nodes[slot].left
        return slot

    def _replace(self, old: int, new: int) -> None:
        parent = self._nodes[old].parent
        self._nodes[new].parent = parent
        if parent is None:
            self._root = new
        elif self._nodes[parent].left == old:
            self._nodes[parent].left = new
        else:
            self._nodes[parent].right = new

    def _detach_leaf(self, slot: int) -> None:
        parent = self._nodes[slot].parent
        if parent is None:
            self._root = None
        elif self._nodes[parent].left == slot:
            self._nodes[parent].left = None
        else:
            self._nodes[parent].right = None

    def _rotate_left(self, slot: int) -> None:
        node = self._nodes[slot]
        pivot = node.right
        pivot_node = self._nodes[pivot]
        node.right = pivot_node.left
        if pivot_node.left is not None:
            self._nodes[pivot_node.left].parent = slot
        self._replace(slot, pivot)
        pivot_node.left = slot
        node.parent = pivot

    def _rotate_right(self, slot: int) -> None:
        node = self._nodes[slot]
        pivot = node.left
        pivot_node = self._nodes[pivot]
        node.left = pivot_node.right
        if pivot_node.right is not None:
            self._nodes[pivot_node.right].parent = slot
        self._replace(slot, pivot)
        pivot_node.right = slot
        node.parent = pivot

    def _fix_insert(self, slot: int) -> None:
        nodes = self._nodes
        while slot != self._root and nodes[nodes[slot].parent].color == RED:
            parent = nodes[slot].parent
            grandparent = nodes[parent].parent
            if parent == nodes[grandparent].left:
                uncle = nodes[grandparent].right
                if self._color(uncle) == RED:
                    nodes[parent].color = BLACK
                    nodes[uncle].color = BLACK
                    nodes[grandparent].color = RED
                    slot = grandparent
                    continue
                if slot == nodes[parent].right:
                    slot = parent
                    self._rotate_left(slot)
                    parent = nodes[slot].parent
                nodes[parent].color = BLACK
                nodes[grandparent].color = RED
                self._rotate_right(grandparent)
            else:
                uncle = nodes[grandparent].left
                if self._color(uncle) == RED:
                    nodes[parent].color = BLACK
                    nodes[uncle].color = BLACK
                    nodes[grandparent].color = RED
                    slot = grandparent
                    continue
                if slot == nodes[parent].left:
                    slot = parent
                    self._rotate_right(slot)
                    parent = nodes[slot].parent
                nodes[parent].color = BLACK
                nodes[grandparent].color = RED
                self._rotate_left(grandparent)
        nodes[self._root].color = BLACK

    def _fix_double_black(self, slot: int) -> None:
        """Rebalance around a black node that is about to lose a black level.

        ``slot`` is still attached while this runs; its sibling is therefore
        guaranteed to exist at every step.
        """
        nodes = self._nodes
        while slot != self._root and nodes[slot].color == BLACK:
            parent = nodes[slot].parent
            if slot == nodes[parent].left:
                sibling = nodes[parent].right
                if nodes[sibling].color == RED:
                    nodes[sibling].color = BLACK
                    nodes[parent].color = RED
                    self._rotate_left(parent)
                    sibling = nodes[parent].right
                if self._color(nodes[sibling].left) == BLACK and self._color(nodes[sibling].right) == BLACK:
                    nodes[sibling].color = RED
                    slot = parent
                    continue
                if self._color(nodes[sibling].right) == BLACK:
                    nodes[nodes[sibling].left].color = BLACK
                    nodes[sibling].color = RED
                    self._rotate_right(sibling)
                    sibling = nodes[parent].right
                nodes[sibling].color = nodes[parent].color
                nodes[parent].color = BLACK
                nodes[nodes[sibling].right].color = BLACK
                self._rotate_left(parent)
                slot = self._root
            else:
                sibling = nodes[parent].left
                if nodes[sibling].color == RED:
                    nodes[sibling].color = BLACK
                    nodes[parent].color = RED
                    self._rotate_right(parent)
                    sibling = nodes[parent].left
                if self._color(nodes[sibling].left) == BLACK and self._color(nodes[sibling].right) == BLACK:
                    nodes[sibling].color = RED
                    slot = parent
                    continue
                if self._color(nodes[sibling].left) == BLACK:
                    nodes[nodes[sibling].right].color = BLACK
                    nodes[sibling].color = RED
                    self._rotate_left(sibling)
                    sibling = nodes[parent].left
                nodes[sibling].color = nodes[parent].color
                nodes[parent].color = BLACK
                nodes[nodes[sibling].left].color = BLACK
                self._rotate_right(parent)
                slot = self._root
        nodes[slot].color = BLACK
