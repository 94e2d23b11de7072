"""
Bounded de-duplicating memory of recent sentences.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Hashable, Set, TypeVar

T = TypeVar("T", bound=Hashable)


class History(Generic[T]):
    """
    Fixed-capacity FIFO with set membership.

    A capacity of 0 disables tracking: nothing is ever added or contained.
    """

    def __init__(self, length: int):
        if length < 0:
            raise ValueError(f"length must be 0 or larger, got {length}")
        self.length = length
        self._items: Set[T] = set()
        self._queue: Deque[T] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def contains(self, item: T) -> bool:
        return item in self._items

    __contains__ = contains

    def add(self, item: T) -> bool:
        """Remember ``item``; returns False if it was already remembered."""
        if self.length == 0 or item in self._items:
            return False

        self._items.add(item)
        self._queue.append(item)
        if len(self._queue) > self.length:
            self._items.discard(self._queue.popleft())
        return True
