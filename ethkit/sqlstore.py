"""A store kept in an SQL database reached through a DB-API connection."""

from __future__ import annotations

import re
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from .store import Entry, Store
from .structs import Address, Hash, Log

_KV_SCHEMA = "CREATE TABLE IF NOT EXISTS kv (key text unique, val text)"

_LOG_SCHEMA = (
    "CREATE TABLE IF NOT EXISTS {table} ("
    "indx numeric, "
    "tx_index numeric, "
    "tx_hash text, "
    "block_num numeric, "
    "block_hash text, "
    "address text, "
    "topics text, "
    "data text)"
)

_PARAMSTYLES = ("qmark", "format", "pyformat", "numeric")
_ENTRY_NAME = re.compile(r"[A-Za-z0-9_]+")


def _parse_fixed(text: str, cls):
    if not text.startswith("0x"):
        raise ValueError(f"0x prefix not found in '{text}'")
    return cls(bytes.fromhex(text[2:]))


class SQLStore(Store):
    """A Store over an open DB-API 2 connection.

    paramstyle names the placeholder style of the driver that made the
    connection: "qmark" (sqlite3), "format" or "pyformat" (PostgreSQL and
    MySQL drivers), or "numeric".
    """

    def __init__(self, connection, paramstyle: str = "qmark") -> None:
        if paramstyle not in _PARAMSTYLES:
            raise ValueError(f"unsupported paramstyle '{paramstyle}'")
        self._conn = connection
        self._paramstyle = paramstyle
        self._lock = threading.RLock()
        with self._cursor() as cur:
            cur.execute(_KV_SCHEMA)

    def _sql(self, query: str) -> str:
        if self._paramstyle == "qmark":
            return query
        if self._paramstyle in ("format", "pyformat"):
            return query.replace("?", "%s")
        parts = query.split("?")
        out = [parts[0]]
        for number, part in enumerate(parts[1:], start=1):
            out.append(f":{number}{part}")
        return "".join(out)

    @contextmanager
    def _cursor(self) -> Iterator:
        with self._lock:
            cur = self._conn.cursor()
            try:
                yield cur
            except BaseException:
                self._conn.rollback()
                raise
            else:
                self._conn.commit()
            finally:
                cur.close()

    def _execute(self, cur, query: str, params=()) -> None:
        cur.execute(self._sql(query), tuple(params))

    def get(self, key: str) -> str:
        with self._cursor() as cur:
            self._execute(cur, "SELECT val FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
        if row is None or row[0] is None:
            return ""
        return row[0]

    def list_prefix(self, prefix: str) -> list[str]:
        with self._cursor() as cur:
            self._execute(
                cur,
                "SELECT val FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                (len(prefix), prefix),
            )
            rows = cur.fetchall()
        return [row[0] for row in rows]

    def set(self, key: str, value: str) -> None:
        with self._cursor() as cur:
            self._execute(
                cur,
                "INSERT INTO kv (key, val) VALUES (?, ?) "
                "ON CONFLICT (key) DO UPDATE SET val = excluded.val",
                (key, value),
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def get_entry(self, name: str) -> "SQLEntry":
        if not _ENTRY_NAME.fullmatch(name):
            raise ValueError(f"invalid entry name '{name}'")
        table = "logs_" + name
        with self._cursor() as cur:
            cur.execute(_LOG_SCHEMA.format(table=table))
        return SQLEntry(self, table)


class SQLEntry(Entry):
    """The logs of one filter, kept in their own table."""

    def __init__(self, store: SQLStore, table: str) -> None:
        self._store = store
        self._table = table

    def _next_index(self, cur) -> int:
        cur.execute(f"SELECT indx FROM {self._table} ORDER BY indx DESC LIMIT 1")
        row = cur.fetchone()
        return 0 if row is None else int(row[0]) + 1

    def last_index(self) -> int:
        with self._store._cursor() as cur:
            return self._next_index(cur)

    def store_logs(self, logs: Iterable[Log]) -> None:
        query = (
            f"INSERT INTO {self._table} "
            "(indx, tx_index, tx_hash, block_num, block_hash, address, data, topics) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
        )
        with self._store._cursor() as cur:
            start = self._next_index(cur)
            for offset, log in enumerate(logs):
                data = "0x" + bytes(log.data).hex() if log.data else ""
                self._store._execute(
                    cur,
                    query,
                    (
                        start + offset,
                        log.transaction_index,
                        str(log.transaction_hash),
                        log.block_number,
                        str(log.block_hash),
                        str(log.address),
                        data,
                        ",".join(str(topic) for topic in log.topics),
                    ),
                )

    def remove_logs(self, index: int) -> None:
        with self._store._cursor() as cur:
            self._store._execute(cur, f"DELETE FROM {self._table} WHERE indx >= ?", (index,))

    def get_log(self, index: int) -> Log:
        with self._store._cursor() as cur:
            self._store._execute(
                cur,
                "SELECT tx_index, tx_hash, block_num, block_hash, address, topics, data "
                f"FROM {self._table} WHERE indx = ?",
                (index,),
            )
            row = cur.fetchone()
        if row is None:
            raise IndexError(f"no log at index {index}")
        tx_index, tx_hash, block_num, block_hash, address, topics, data = row

        log = Log(
            transaction_index=int(tx_index),
            transaction_hash=_parse_fixed(tx_hash, Hash),
            block_number=int(block_num),
            block_hash=_parse_fixed(block_hash, Hash),
            address=_parse_fixed(address, Address),
        )
        if topics:
            log.topics = [_parse_fixed(item, Hash) for item in topics.split(",")]
        if data:
            if not data.startswith("0x"):
                raise ValueError("0x prefix not found in data")
            log.data = bytes.fromhex(data[2:])
        return log