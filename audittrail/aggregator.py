"""
Read-only summaries over a sequence of events.

Every function is pure: it takes the events (oldest first) and never touches a store.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .events import Event, PageCount, Stats, Summary, TimeRange

UNDEFINED_TYPE = "undefined"
DEFAULT_TOP_PAGES = 10
DEVICE_TYPES = ("desktop", "mobile", "tablet")

COLUMNS = ["eventType", "visitorId", "sessionId", "path", "device", "duration"]


def _page_path(payload: Dict[str, Any]) -> Optional[str]:
    page = payload.get("page")
    if isinstance(page, dict):
        path = page.get("path")
    elif isinstance(page, str):
        path = page
    else:
        path = payload.get("path")
    return path if isinstance(path, str) and path else None


def _device_type(payload: Dict[str, Any]) -> Optional[str]:
    device = payload.get("device")
    if isinstance(device, dict) and device.get("type"):
        return str(device["type"])
    return None


def _seconds(value: Any) -> Optional[float]:
    # non-numeric and non-finite durations (1e309, huge ints) count as missing
    if value is None or isinstance(value, (dict, list)):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return seconds if math.isfinite(seconds) else None


def to_frame(events: Sequence[Event]) -> pd.DataFrame:
    rows = [
        {
            "eventType": e.event_type,
            "visitorId": e.visitor_id,
            "sessionId": e.session_id,
            "path": _page_path(e.payload),
            "device": _device_type(e.payload),
            "duration": _seconds(e.payload.get("duration")),
        }
        for e in events
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def count_by_type(events: Sequence[Event]) -> Dict[str, int]:
    df = to_frame(events)
    if df.empty:
        return {}
    types = df["eventType"].fillna(UNDEFINED_TYPE)
    sizes = types.groupby(types, sort=False).size()
    return {str(k): int(v) for k, v in sizes.items()}


def unique_visitor_count(events: Sequence[Event]) -> int:
    # events without a visitorId are not counted as a visitor
    return int(to_frame(events)["visitorId"].dropna().nunique())


def unique_session_count(events: Sequence[Event]) -> int:
    return int(to_frame(events)["sessionId"].dropna().nunique())


def top_pages(
    events: Sequence[Event],
    limit: int = DEFAULT_TOP_PAGES,
    event_type: Optional[str] = None,
) -> List[Tuple[str, int]]:
    df = to_frame(events)
    if event_type is not None:
        df = df[df["eventType"] == event_type]
    paths = df["path"].dropna()
    if paths.empty or limit <= 0:
        return []
    # groupby(sort=False) keeps first-seen order; mergesort keeps it among ties
    counts = paths.groupby(paths, sort=False).size().sort_values(ascending=False, kind="mergesort")
    return [(str(path), int(n)) for path, n in counts.head(limit).items()]


def _event_time(event: Event) -> Optional[str]:
    if event.timestamp:
        return event.timestamp
    return event.server.received_at if event.server else None


def time_range(events: Sequence[Event]) -> Tuple[Optional[str], Optional[str]]:
    if not events:
        return None, None
    return _event_time(events[0]), _event_time(events[-1])


def device_breakdown(events: Sequence[Event]) -> Dict[str, int]:
    breakdown = {d: 0 for d in DEVICE_TYPES}
    df = to_frame(events)
    views = df.loc[df["eventType"] == "page_view", "device"].fillna("desktop")
    for device, n in views.groupby(views, sort=False).size().items():
        breakdown[str(device)] = breakdown.get(str(device), 0) + int(n)
    return breakdown


def average_time_on_page(events: Sequence[Event]) -> int:
    df = to_frame(events)
    durations = df.loc[df["eventType"] == "page_exit", "duration"]
    if durations.empty:
        return 0
    seconds = pd.to_numeric(durations, errors="coerce").fillna(0.0)
    # divide before summing so values near the float max cannot overflow the total
    return int(round(float(seconds.div(len(seconds)).sum())))


def recent_events(events: Sequence[Event], limit: int = 10) -> List[Event]:
    if limit <= 0:
        return []
    return list(reversed(events[-limit:]))


def summarize(events: Sequence[Event]) -> Summary:
    return Summary(
        total_events=len(events),
        unique_visitors=unique_visitor_count(events),
        events_by_type=count_by_type(events),
    )


def build_stats(events: Sequence[Event], top_limit: int = DEFAULT_TOP_PAGES) -> Stats:
    by_type = count_by_type(events)
    first, last = time_range(events)
    return Stats(
        total_events=len(events),
        page_views=by_type.get("page_view", 0),
        clicks=by_type.get("click", 0),
        form_submissions=by_type.get("form_submission", 0),
        unique_sessions=unique_session_count(events),
        unique_visitors=unique_visitor_count(events),
        devices=device_breakdown(events),
        top_pages=[PageCount(path=p, count=n) for p, n in top_pages(events, top_limit, event_type="page_view")],
        recent_events=recent_events(events),
        time_range=TimeRange(first=first, last=last),
        average_time_on_page=average_time_on_page(events),
    )
