from __future__ import annotations

import threading
from typing import List

from ..events import Event
from .base import check_capacity


class InMemoryEventStore:
    """
    Process-local store. A restart yields an empty store.
    """

    def __init__(self, capacity: int = 1000) -> None:
        self.capacity = check_capacity(capacity)
        self._events: List[Event] = []
        self._mx = threading.Lock()

    def append(self, event: Event) -> None:
        with self._mx:
            self._events.append(event)
            overflow = len(self._events) - self.capacity
            if overflow > 0:
                del self._events[:overflow]

    def all(self) -> List[Event]:
        with self._mx:
            return list(self._events)

    def clear(self) -> None:
        with self._mx:
            self._events.clear()

    def count(self) -> int:
        with self._mx:
            return len(self._events)
