"""A store persisted in a single database file."""

from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from .decoding import decode_log
from .store import Entry, Store
from .structs import Log

_SCHEMA = """
CREATE TABLE IF NOT EXISTS conf (
    key TEXT PRIMARY KEY,
    val TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS logs (
    entry TEXT NOT NULL,
    indx INTEGER NOT NULL,
    data TEXT NOT NULL,
    PRIMARY KEY (entry, indx)
);
"""


class FileStore(Store):
    """A Store kept in a file; logs are stored as their JSON form."""

    def __init__(self, path) -> None:
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(os.fspath(path), check_same_thread=False)
        try:
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error:
            self._conn.close()
            raise

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock, self._conn:
            yield self._conn

    def get(self, key: str) -> str:
        with self._transaction() as conn:
            row = conn.execute("SELECT val FROM conf WHERE key = ?", (key,)).fetchone()
        return row[0] if row else ""

    def list_prefix(self, prefix: str) -> list[str]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT val FROM conf WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            ).fetchall()
        return [row[0] for row in rows]

    def set(self, key: str, value: str) -> None:
        with self._transaction() as conn:
            conn.execute("INSERT OR REPLACE INTO conf (key, val) VALUES (?, ?)", (key, value))

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def get_entry(self, name: str) -> "FileEntry":
        return FileEntry(self, name)


class FileEntry(Entry):
    """The logs of one filter inside a FileStore."""

    def __init__(self, store: FileStore, name: str) -> None:
        self._store = store
        self._name = name

    @staticmethod
    def _next_index(conn: sqlite3.Connection, name: str) -> int:
        row = conn.execute("SELECT MAX(indx) FROM logs WHERE entry = ?", (name,)).fetchone()
        return 0 if row[0] is None else row[0] + 1

    def last_index(self) -> int:
        with self._store._transaction() as conn:
            return self._next_index(conn, self._name)

    def store_log(self, log: Log) -> None:
        self.store_logs([log])

    def store_logs(self, logs: Iterable[Log]) -> None:
        with self._store._transaction() as conn:
            start = self._next_index(conn, self._name)
            conn.executemany(
                "INSERT INTO logs (entry, indx, data) VALUES (?, ?, ?)",
                (
                    (self._name, start + offset, log.to_json())
                    for offset, log in enumerate(logs)
                ),
            )

    def remove_logs(self, index: int) -> None:
        with self._store._transaction() as conn:
            conn.execute("DELETE FROM logs WHERE entry = ? AND indx >= ?", (self._name, index))

    def get_log(self, index: int) -> Log:
        with self._store._transaction() as conn:
            row = conn.execute(
                "SELECT data FROM logs WHERE entry = ? AND indx = ?", (self._name, index)
            ).fetchone()
        if row is None:
            raise IndexError(f"no log at index {index}")
        return decode_log(row[0])