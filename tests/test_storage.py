from __future__ import annotations

import pytest

from sipswp.core.history import HistoryStore
from sipswp.schemas.history import SWPParams, SWPResults
from sipswp.storage.kv import InMemoryStorage, SQLiteStorage, StorageError


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    return SQLiteStorage(tmp_path / "history.db")


def test_get_set_remove(backend):
    assert backend.get("k") is None

    backend.set("k", "[1]")
    assert backend.get("k") == "[1]"

    backend.set("k", "[2, 1]")
    assert backend.get("k") == "[2, 1]"

    backend.remove("k")
    assert backend.get("k") is None


def test_remove_missing_key_is_a_noop(backend):
    backend.remove("absent")
    assert backend.get("absent") is None


def test_keys_are_independent(backend):
    backend.set("a", "1")
    backend.set("b", "2")
    backend.remove("a")
    assert backend.get("b") == "2"


def test_sqlite_history_survives_a_new_store_instance(tmp_path):
    path = tmp_path / "history.db"
    HistoryStore(SQLiteStorage(path)).append(
        "SWP",
        SWPParams(initialInvestment=100_000, monthlyWithdrawal=2_500, returnRate=12, duration=8),
        SWPResults(totalWithdrawals=240_000, finalBalance=0),
    )

    records = HistoryStore(SQLiteStorage(path)).read_all()
    assert len(records) == 1
    assert records[0].type == "SWP"


def test_sqlite_failures_raise_storage_error(tmp_path):
    # a directory cannot be opened as a database file
    storage = SQLiteStorage(tmp_path)

    with pytest.raises(StorageError):
        storage.get("k")
    with pytest.raises(StorageError):
        storage.set("k", "[]")
    with pytest.raises(StorageError):
        storage.remove("k")
