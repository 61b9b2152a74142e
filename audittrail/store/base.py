from __future__ import annotations

from typing import List, Protocol

from ..events import Event


class EventStore(Protocol):
    """
    Bounded, insertion-ordered event store.

    Contract:
    - append(event) -> always accepted; oldest events are evicted once count() > capacity
    - all() -> oldest first, a copy the caller may keep
    - clear() -> empties the store
    - count() -> current number of events
    """

    capacity: int

    def append(self, event: Event) -> None:
        ...

    def all(self) -> List[Event]:
        ...

    def clear(self) -> None:
        ...

    def count(self) -> int:
        ...


def check_capacity(capacity: int) -> int:
    if capacity < 1:
        raise ValueError(f"capacity must be >= 1, got {capacity}")
    return capacity
