from __future__ import annotations

from ..config import STORE_BACKENDS, Settings
from .base import EventStore
from .file import JsonFileEventStore
from .memory import InMemoryEventStore
from .redis_store import RedisEventStore


def make_store(settings: Settings) -> EventStore:
    backend = settings.store_backend
    if backend == "memory":
        return InMemoryEventStore(capacity=settings.capacity)
    if backend == "file":
        return JsonFileEventStore(settings.log_file, capacity=settings.capacity)
    if backend == "redis":
        return RedisEventStore.from_url(settings.redis_url, key=settings.redis_key, capacity=settings.capacity)
    raise ValueError(f"AUDIT_STORE must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}")
