from datetime import datetime, timezone

import pytest
import redis

from audittrail.events import Event, ServerInfo


class FakeRedis:
    """Just enough of the redis list API for RedisEventStore."""

    def __init__(self, fail: bool = False):
        self.lists = {}
        self.fail = fail

    def _check(self):
        if self.fail:
            raise redis.ConnectionError("Connection refused")

    def rpush(self, key, value):
        self._check()
        self.lists.setdefault(key, []).append(value.encode() if isinstance(value, str) else value)

    def ltrim(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        stop = len(items) + end + 1 if end < 0 else end + 1
        start = max(len(items) + start, 0) if start < 0 else start
        self.lists[key] = items[start:stop]

    def lrange(self, key, start, end):
        self._check()
        items = self.lists.get(key, [])
        return list(items[start:] if end == -1 else items[start:end + 1])

    def llen(self, key):
        self._check()
        return len(self.lists.get(key, []))

    def delete(self, key):
        self._check()
        self.lists.pop(key, None)

    def ping(self):
        self._check()
        return True

    def pipeline(self, transaction=True):
        return _FakePipeline(self)


class _FakePipeline:
    def __init__(self, client):
        self._client = client
        self._ops = []

    def rpush(self, *args):
        self._ops.append(("rpush", args))

    def ltrim(self, *args):
        self._ops.append(("ltrim", args))

    def execute(self):
        return [getattr(self._client, name)(*args) for name, args in self._ops]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def down_redis():
    return FakeRedis(fail=True)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 5, 1, 12, 30, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture
def make_event():
    def _make(n=0, event_type="page_view", visitor_id=None, session_id=None, timestamp=None, **payload):
        return Event(
            event_type=event_type,
            visitor_id=visitor_id,
            session_id=session_id,
            timestamp=timestamp,
            payload={"n": n, **payload},
            server=ServerInfo(received_at=f"2024-05-01T12:00:{n:02d}.000Z", ip_hash="0" * 16),
        )
    return _make
