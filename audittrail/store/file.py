"""Single JSON array file, rewritten wholesale and truncated to capacity on every write."""
from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import List

from pydantic import ValidationError

from ..errors import StoreUnavailable
from ..events import Event
from .base import check_capacity

logger = logging.getLogger(__name__)


class JsonFileEventStore:
    def __init__(self, path: Path, capacity: int = 1000) -> None:
        self.capacity = check_capacity(capacity)
        self.path = Path(path)
        self._mx = threading.Lock()
        self._events: List[Event] = self._load()

    def _load(self) -> List[Event]:
        if not self.path.exists():
            return []
        try:
            rows = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(rows, list):
                raise ValueError("log file does not hold a JSON array")
            events = [Event.model_validate(row) for row in rows]
        except (OSError, ValueError, ValidationError) as e:
            # corrupt or unreadable file: start over rather than refuse to boot
            logger.error("Could not load audit log %s: %r", self.path, e)
            return []
        return events[-self.capacity:]

    def _save(self, events: List[Event]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps([e.to_wire() for e in events], indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning("Could not write audit log %s: %r", self.path, e)
            raise StoreUnavailable(f"cannot write {self.path}") from e

    def append(self, event: Event) -> None:
        with self._mx:
            events = (self._events + [event])[-self.capacity:]
            self._save(events)
            self._events = events

    def all(self) -> List[Event]:
        with self._mx:
            return list(self._events)

    def clear(self) -> None:
        with self._mx:
            self._save([])
            self._events = []

    def count(self) -> int:
        with self._mx:
            return len(self._events)
