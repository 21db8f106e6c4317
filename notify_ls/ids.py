from __future__ import annotations

import threading


class IdAllocator:
    """
    Hands out strictly increasing integer identifiers.

    Requests, notifications and progress tokens draw from the same allocator,
    so no two of them ever observe the same value.
    """

    def __init__(self, start: int = 1) -> None:
        self._next = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next = value + 1
        return value

    def peek(self) -> int:
        """Return the value the next call to ``next`` will produce."""
        with self._lock:
            return self._next
