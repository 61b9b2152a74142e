from __future__ import annotations

import logging
from typing import List

import redis
from pydantic import ValidationError

from ..errors import StoreUnavailable
from ..events import Event
from .base import check_capacity

logger = logging.getLogger(__name__)


class RedisEventStore:
    """
    Events kept as JSON strings in one Redis list, oldest at the head.
    RPUSH + LTRIM run in a single MULTI/EXEC so the list never exceeds capacity.
    """

    def __init__(self, client: redis.Redis, key: str = "audit:events", capacity: int = 1000) -> None:
        self.capacity = check_capacity(capacity)
        self.key = key
        self._r = client

    @classmethod
    def from_url(cls, url: str, key: str = "audit:events", capacity: int = 1000) -> "RedisEventStore":
        return cls(redis.Redis.from_url(url, decode_responses=False), key=key, capacity=capacity)

    def append(self, event: Event) -> None:
        try:
            pipe = self._r.pipeline(transaction=True)
            pipe.rpush(self.key, event.model_dump_json(by_alias=True))
            pipe.ltrim(self.key, -self.capacity, -1)
            pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable(f"redis append failed: {e}") from e

    def all(self) -> List[Event]:
        try:
            rows = self._r.lrange(self.key, 0, -1)
        except redis.RedisError as e:
            raise StoreUnavailable(f"redis read failed: {e}") from e
        events = []
        for raw in rows:
            try:
                events.append(Event.model_validate_json(raw))
            except ValidationError as e:
                logger.warning("skip undecodable event in %s: %r", self.key, e)
        return events

    def clear(self) -> None:
        try:
            self._r.delete(self.key)
        except redis.RedisError as e:
            raise StoreUnavailable(f"redis clear failed: {e}") from e

    def count(self) -> int:
        try:
            return int(self._r.llen(self.key))
        except redis.RedisError as e:
            raise StoreUnavailable(f"redis count failed: {e}") from e

    def ping(self) -> bool:
        try:
            return bool(self._r.ping())
        except redis.RedisError:
            return False
