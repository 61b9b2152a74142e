from __future__ import annotations
import random, uuid
from datetime import datetime, timedelta, timezone
from typing import List, Dict

SECTIONS = ["/", "/projects", "/about", "/contact", "/blog"]


def _iso(t: datetime) -> str:
    return t.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _ids(prefix: str):
    return f"visitor_{prefix}_{uuid.uuid4().hex[:8]}", f"session_{uuid.uuid4().hex[:9]}"


def _view(vid, sid, t, path, device="desktop") -> Dict:
    return {"eventType": "page_view", "visitorId": vid, "sessionId": sid, "timestamp": _iso(t),
            "page": {"path": path, "title": path.strip("/") or "home"}, "device": {"type": device}}


def reader(pages=4, step=40.0) -> List[Dict]:
    """Reads several sections top to bottom, scrolls deep, leaves slowly."""
    vid, sid = _ids("reader"); t = datetime.now(timezone.utc); ev = []
    for path in random.sample(SECTIONS, k=min(pages, len(SECTIONS))):
        ev.append(_view(vid, sid, t, path))
        for depth in (25, 50, 75, 100):
            t += timedelta(seconds=step / 4)
            ev.append({"eventType": "scroll_depth", "visitorId": vid, "sessionId": sid,
                       "timestamp": _iso(t), "depth": depth, "page": path})
        ev.append({"eventType": "page_exit", "visitorId": vid, "sessionId": sid,
                   "timestamp": _iso(t), "duration": int(step), "page": path})
    return ev


def bouncer(device="mobile") -> List[Dict]:
    """Lands on the home page and leaves within seconds."""
    vid, sid = _ids("bouncer"); t = datetime.now(timezone.utc)
    return [
        _view(vid, sid, t, "/", device=device),
        {"eventType": "page_exit", "visitorId": vid, "sessionId": sid,
         "timestamp": _iso(t + timedelta(seconds=3)), "duration": random.randint(1, 5), "page": "/"},
    ]


def contact_submitter() -> List[Dict]:
    """Goes straight to the contact form and submits it."""
    vid, sid = _ids("contact"); t = datetime.now(timezone.utc)
    return [
        _view(vid, sid, t, "/"),
        {"eventType": "click", "visitorId": vid, "sessionId": sid, "timestamp": _iso(t + timedelta(seconds=2)),
         "element": {"tag": "A", "id": "nav-contact", "href": "/contact"}, "page": "/"},
        _view(vid, sid, t + timedelta(seconds=3), "/contact"),
        # field names only, never values
        {"eventType": "form_submission", "visitorId": vid, "sessionId": sid,
         "timestamp": _iso(t + timedelta(seconds=40)), "formId": "contact-form",
         "fields": ["name", "email", "message"], "page": "/contact"},
    ]
