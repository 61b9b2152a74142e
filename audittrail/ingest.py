"""
Turns a raw client event into a storable Event.

Only the server decides identity fields: the client identifier is resolved from
proxy headers and kept as a truncated SHA-256 hash. Raw IPs are never stored.
"""
from __future__ import annotations

import copy
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import MalformedInput
from .events import Event, ServerInfo

UNKNOWN_CLIENT = "unknown"
IP_HASH_LEN = 16

# keys lifted out of the raw body; everything else lands in payload
_RESERVED = ("eventType", "type", "visitorId", "sessionId", "timestamp", "server")


@dataclass(frozen=True)
class RequestContext:
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestContext":
        return cls({str(k).lower(): str(v) for k, v in headers.items()})

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_utc(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_body(body: bytes) -> Dict[str, Any]:
    try:
        raw = json.loads(body)
    except (ValueError, TypeError) as e:
        raise MalformedInput(f"request body is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise MalformedInput("event must be a JSON object")
    return raw


def client_identifier(ctx: RequestContext) -> str:
    forwarded = ctx.header("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (ctx.header("x-real-ip") or "").strip()
    return real_ip or UNKNOWN_CLIENT


def hash_identifier(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:IP_HASH_LEN]


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


def ingest(
    raw: Any,
    ctx: RequestContext,
    *,
    require_event_type: bool = False,
    clock: Optional[Callable[[], datetime]] = None,
) -> Event:
    """
    Validate and enrich one raw event. Does not store it.

    `eventType` falls back to the browser tracker's legacy `type` key. A client
    supplied `server` block is discarded.
    """
    if not isinstance(raw, Mapping):
        raise MalformedInput("event must be a JSON object")

    event_type = _text(raw.get("eventType", raw.get("type")))
    if require_event_type and not event_type:
        raise MalformedInput("eventType is required")

    payload = {k: copy.deepcopy(v) for k, v in raw.items() if k not in _RESERVED}
    server = ServerInfo(
        received_at=iso_utc((clock or utc_now)()),
        ip_hash=hash_identifier(client_identifier(ctx)),
        user_agent=ctx.header("user-agent") or "",
        referer=ctx.header("referer") or ctx.header("referrer") or "",
    )
    return Event(
        event_type=event_type,
        visitor_id=_text(raw.get("visitorId")),
        session_id=_text(raw.get("sessionId")),
        timestamp=_text(raw.get("timestamp")),
        payload=payload,
        server=server,
    )
