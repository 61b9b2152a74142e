import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ..config import Settings
from ..events import Event
from ..store.base import EventStore
from ..store.factory import make_store

COLUMNS = [
    "eventType", "visitorId", "sessionId", "timestamp",
    "receivedAt", "ipHash", "userAgent", "referer", "payload",
]


def to_rows(events: List[Event]) -> List[dict]:
    rows = []
    for e in events:
        server = e.server
        rows.append({
            "eventType": e.event_type,
            "visitorId": e.visitor_id,
            "sessionId": e.session_id,
            "timestamp": e.timestamp,
            "receivedAt": server.received_at if server else None,
            "ipHash": server.ip_hash if server else None,
            "userAgent": server.user_agent if server else None,
            "referer": server.referer if server else None,
            # payload shapes differ per event type; keep it as one JSON column
            "payload": json.dumps(e.payload, sort_keys=True, default=str),
        })
    return rows


def export_snapshot(store: EventStore, outdir: Path) -> Optional[Path]:
    events = store.all()
    if not events:
        return None
    outdir.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(to_rows(events), columns=COLUMNS)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
    path = outdir / f"events_{stamp}.parquet"
    df.to_parquet(path, engine="pyarrow", index=False)
    return path


def main():
    settings = Settings.from_env()
    store = make_store(settings)
    path = export_snapshot(store, settings.export_dir)
    if path is None:
        print("[export] store empty — nothing to write.")
        return
    print(f"[export] wrote {store.count()} rows → {path}")


if __name__ == "__main__":
    main()
