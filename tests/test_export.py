import json

import pandas as pd

from audittrail.store.memory import InMemoryEventStore
from audittrail.workers.export_parquet import COLUMNS, export_snapshot


class TestExportSnapshot:

    def test_empty_store_writes_nothing(self, tmp_path):
        assert export_snapshot(InMemoryEventStore(), tmp_path / "out") is None
        assert not (tmp_path / "out").exists()

    def test_writes_parquet(self, tmp_path, make_event):
        store = InMemoryEventStore()
        store.append(make_event(1, "page_view", visitor_id="a", page={"path": "/"}))
        store.append(make_event(2, "click", element={"id": "cta", "classes": ["btn"]}))

        path = export_snapshot(store, tmp_path)

        df = pd.read_parquet(path)
        assert list(df.columns) == COLUMNS
        assert df["eventType"].tolist() == ["page_view", "click"]
        assert json.loads(df["payload"].iloc[1])["element"]["id"] == "cta"
        assert df["ipHash"].iloc[0] == "0" * 16
