"""Bounded LRU cache of rendered grid rows."""

from __future__ import annotations

import threading
from collections import OrderedDict

DEFAULT_CAPACITY = 1000


class RowCache:
    """Maps absolute row offsets to rendered cell strings.

    ``get`` promotes the entry to most recently used; ``set`` evicts the
    least recently used entry when full. All operations take the internal
    lock so the cache can be shared with background render work.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._entries: OrderedDict[int, list[str]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, offset: int) -> list[str] | None:
        with self._lock:
            values = self._entries.get(offset)
            if values is None:
                return None
            self._entries.move_to_end(offset)
            return values

    def set(self, offset: int, values: list[str]) -> None:
        with self._lock:
            if offset in self._entries:
                self._entries[offset] = values
                self._entries.move_to_end(offset)
                return
            if len(self._entries) >= self.capacity:
                self._entries.popitem(last=False)
            self._entries[offset] = values

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, offset: object) -> bool:
        with self._lock:
            return offset in self._entries
