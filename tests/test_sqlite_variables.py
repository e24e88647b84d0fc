from __future__ import annotations

from adapters.sqlite_variables import SQLiteVariableStore


def test_set_variable_upserts_latest_value(tmp_path) -> None:
    store = SQLiteVariableStore(str(tmp_path / "vars.db"))
    store.init_db()

    assert store.get_variable("summary_buckets") is None
    store.set_variable("summary_buckets", "5min ago, totalMessages: 1")
    store.set_variable("summary_buckets", "5min ago, totalMessages: 2")

    assert store.get_variable("summary_buckets") == "5min ago, totalMessages: 2"
    assert store.list_variables() == {"summary_buckets": "5min ago, totalMessages: 2"}
