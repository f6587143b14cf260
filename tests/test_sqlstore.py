import sqlite3

import pytest

from ethkit.sqlstore import SQLStore
from ethkit.structs import Address, Hash, Log


@pytest.fixture
def store():
    db = SQLStore(sqlite3.connect(":memory:"))
    yield db
    db.close()


def test_multiple_stores(store):
    entry0 = store.get_entry("0")
    entry0.store_logs([Log(block_number=10)])
    entry1 = store.get_entry("1")
    entry1.store_logs([Log(block_number=15)])
    assert entry0.last_index() == 1
    assert entry1.last_index() == 1


def test_prefix(store):
    for value in ("val1", "val2", "val3"):
        store.set(value, value)
    store.set("a", "b")
    assert len(store.list_prefix("val")) == 3
    assert len(store.list_prefix("a")) == 1
    assert len(store.list_prefix("b")) == 0


def test_get_set(store):
    assert store.get("k1") == ""
    store.set("k1", "v1")
    assert store.get("k1") == "v1"
    store.set("k1", "v2")
    assert store.get("k1") == "v2"


def test_store_logs(store):
    entry = store.get_entry("1")
    assert entry.last_index() == 0
    log = Log(block_number=10)
    entry.store_logs([log])
    assert entry.last_index() == 1
    assert entry.get_log(0) == log
    again = store.get_entry("1")
    assert again.last_index() == 1


def test_remove_logs(store):
    logs = [Log(block_number=i) for i in range(10)]
    entry = store.get_entry("1")
    entry.store_logs(logs)
    entry.remove_logs(5)
    assert entry.last_index() == 5
    entry.store_logs(logs[5:])
    assert entry.last_index() == 10


def test_full_log_round_trip(store):
    log = Log(
        transaction_index=3,
        transaction_hash=Hash(b"\x11" * 32),
        block_hash=Hash(b"\x22" * 32),
        block_number=7,
        address=Address(b"\x33" * 20),
        data=b"\x01\x02",
        topics=[Hash(b"\x44" * 32), Hash(b"\x55" * 32)],
    )
    entry = store.get_entry("abc")
    entry.store_logs([log])
    assert entry.get_log(0) == log


def test_get_missing_log_raises(store):
    entry = store.get_entry("1")
    with pytest.raises(IndexError):
        entry.get_log(0)


def test_invalid_entry_name(store):
    with pytest.raises(ValueError):
        store.get_entry("bad name; drop")


def test_invalid_paramstyle():
    with pytest.raises(ValueError):
        SQLStore(sqlite3.connect(":memory:"), paramstyle="named")


def test_persists_in_file(tmp_path):
    path = tmp_path / "test.db"
    first = SQLStore(sqlite3.connect(path))
    first.set("k", "v")
    first.get_entry("1").store_logs([Log(block_number=1), Log(block_number=2)])
    first.close()

    second = SQLStore(sqlite3.connect(path))
    assert second.get("k") == "v"
    entry = second.get_entry("1")
    assert entry.last_index() == 2
    assert entry.get_log(1).block_number == 2
    second.close()