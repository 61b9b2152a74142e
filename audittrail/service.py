from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, List, Literal, Optional, TypeVar

from . import aggregator
from .config import Settings
from .errors import AuditError
from .events import Event, Stats, Summary
from .ingest import RequestContext, ingest, parse_body
from .store.base import EventStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

ResultStatus = Literal["ok", "error"]


@dataclass(frozen=True)
class ErrorInfo:
    code: str       # stable machine code, e.g. "malformed_input"
    message: str    # safe human message


@dataclass(frozen=True)
class Result(Generic[T]):
    status: ResultStatus
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(status="ok", data=data)

    @classmethod
    def failure(cls, exc: AuditError) -> "Result[T]":
        return cls(status="error", error=ErrorInfo(code=exc.code, message=str(exc)))


class AuditService:
    """Ingest/append, listing, aggregation and reset over one injected store."""

    def __init__(
        self,
        store: EventStore,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.settings = settings or Settings()
        self._clock = clock

    def _run(self, op: str, fn: Callable[[], T]) -> Result[T]:
        try:
            return Result.success(fn())
        except AuditError as e:
            logger.warning("%s failed: %s (%s)", op, e.code, e)
            return Result.failure(e)

    def submit(self, body: bytes, ctx: RequestContext) -> Result[int]:
        def _submit() -> int:
            event = ingest(
                parse_body(body),
                ctx,
                require_event_type=self.settings.require_event_type,
                clock=self._clock,
            )
            self.store.append(event)
            logger.debug("logged %s event from %s", event.event_type, event.server.ip_hash)
            return self.store.count()

        return self._run("submit", _submit)

    def events(self) -> Result[List[Event]]:
        return self._run("events", lambda: list(reversed(self.store.all())))

    def export(self) -> Result[List[Event]]:
        return self._run("export", self.store.all)

    def summary(self) -> Result[Summary]:
        return self._run("summary", lambda: aggregator.summarize(self.store.all()))

    def stats(self) -> Result[Stats]:
        return self._run(
            "stats",
            lambda: aggregator.build_stats(self.store.all(), top_limit=self.settings.top_pages_limit),
        )

    def count(self) -> Result[int]:
        return self._run("count", self.store.count)

    def store_ok(self) -> bool:
        ping = getattr(self.store, "ping", None)
        if ping is not None:
            return bool(ping())
        return self.count().ok

    def clear(self) -> Result[Any]:
        def _clear() -> None:
            self.store.clear()
            logger.info("audit store cleared")

        return self._run("clear", _clear)
