from pathlib import Path

import pytest

from binroute.errors import MissingCredentialError
from binroute.persistence.store import FileKeyValueStore, SupabaseKeyValueStore


def test_file_store_creates_store_directory(tmp_path: Path) -> None:
    store = FileKeyValueStore(root=tmp_path)

    assert store.store_root.exists()
    assert store.store_root.is_dir()
    assert store.store_root.parent == tmp_path


def test_file_store_reads_writes_and_deletes(tmp_path: Path) -> None:
    store = FileKeyValueStore(root=tmp_path)

    assert store.get("fullBins") is None
    store.set("fullBins", '[{"id": "a"}]')
    assert store.get("fullBins") == '[{"id": "a"}]'
    assert store.path_for("fullBins").read_text(encoding="utf-8") == '[{"id": "a"}]'

    store.set("fullBins", "[]")
    assert store.get("fullBins") == "[]"
    assert [path.name for path in store.store_root.iterdir()] == ["fullBins.json"]

    store.delete("fullBins")
    store.delete("fullBins")
    assert store.get("fullBins") is None


def test_file_store_sanitizes_keys(tmp_path: Path) -> None:
    store = FileKeyValueStore(root=tmp_path)

    assert store.path_for("../escape/key").parent == store.store_root


class _Result:
    def __init__(self, data):
        self.data = data


class FakeTable:
    """Records the query chain the Supabase store issues."""

    def __init__(self, rows: dict):
        self.rows = rows
        self._filter = None
        self._op = None
        self._payload = None

    def select(self, *columns):
        self._op = "select"
        return self

    def eq(self, column, value):
        self._filter = value
        return self

    def limit(self, count):
        return self

    def upsert(self, payload):
        self._op = "upsert"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def execute(self):
        if self._op == "select":
            value = self.rows.get(self._filter)
            return _Result([] if value is None else [{"value": value}])
        if self._op == "upsert":
            self.rows[self._payload["key"]] = self._payload["value"]
            return _Result([self._payload])
        self.rows.pop(self._filter, None)
        return _Result([])


class FakeSupabase:
    def __init__(self):
        self.rows = {}
        self.tables = []

    def table(self, name):
        self.tables.append(name)
        return FakeTable(self.rows)


def test_supabase_store_round_trip() -> None:
    client = FakeSupabase()
    store = SupabaseKeyValueStore(client=client, table="kv_store")

    assert store.get("fullBins") is None
    store.set("fullBins", "[]")
    assert store.get("fullBins") == "[]"
    store.delete("fullBins")
    assert store.get("fullBins") is None
    assert set(client.tables) == {"kv_store"}


def test_supabase_store_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    from binroute.persistence import store as store_module

    monkeypatch.setattr(store_module, "get_supabase_client", lambda: None)
    with pytest.raises(MissingCredentialError):
        SupabaseKeyValueStore()
