import pytest

from ethkit.filestore import FileStore
from ethkit.structs import Log, hex_to_address, hex_to_hash


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "test.db"


@pytest.fixture
def store(db_path):
    s = FileStore(db_path)
    yield s
    s.close()


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
    assert store.list_prefix("val") == ["val1", "val2", "val3"]


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
    assert [entry.get_log(i).block_number for i in range(10)] == list(range(10))


def test_store_log_single(store):
    entry = store.get_entry("single")
    entry.store_log(Log(block_number=7))
    entry.store_log(Log(block_number=8))
    assert entry.last_index() == 2
    assert entry.get_log(1).block_number == 8


def test_full_log_round_trip(store):
    log = Log(
        removed=True,
        log_index=3,
        transaction_index=2,
        transaction_hash=hex_to_hash("0xabc"),
        block_hash=hex_to_hash("0xdef"),
        block_number=42,
        address=hex_to_address("0x123"),
        data=b"\x01\x02\x03",
        topics=[hex_to_hash("0x1"), hex_to_hash("0x2")],
    )
    entry = store.get_entry("full")
    entry.store_logs([log])
    assert entry.get_log(0) == log


def test_get_missing_log(store):
    entry = store.get_entry("1")
    with pytest.raises(IndexError):
        entry.get_log(0)


def test_persists_across_reopen(db_path):
    with FileStore(db_path) as first:
        first.set("genesis", "0x01")
        first.get_entry("f").store_logs([Log(block_number=5)])
    with FileStore(db_path) as second:
        assert second.get("genesis") == "0x01"
        entry = second.get_entry("f")
        assert entry.last_index() == 1
        assert entry.get_log(0).block_number == 5