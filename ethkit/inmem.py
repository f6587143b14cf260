"""A store that keeps everything in memory."""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable

from .store import Entry, Store
from .structs import Log


class InmemEntry(Entry):
    """A log entry held in a Python list."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._logs: list[Log] = []

    def last_index(self) -> int:
        with self._lock:
            return len(self._logs)

    def logs(self) -> list[Log]:
        """Return the stored logs in order."""
        with self._lock:
            return list(self._logs)

    def store_logs(self, logs: Iterable[Log]) -> None:
        with self._lock:
            self._logs.extend(logs)

    def remove_logs(self, index: int) -> None:
        with self._lock:
            if not 0 <= index <= len(self._logs):
                raise IndexError(f"index {index} out of range for {len(self._logs)} logs")
            del self._logs[index:]

    def get_log(self, index: int) -> Log:
        with self._lock:
            if not 0 <= index < len(self._logs):
                raise IndexError(f"no log at index {index}")
            return copy.copy(self._logs[index])


class InmemStore(Store):
    """A Store whose values and entries live only as long as the object."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, InmemEntry] = {}
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str:
        with self._lock:
            return self._values.get(key, "")

    def list_prefix(self, prefix: str) -> list[str]:
        with self._lock:
            return [
                value
                for key, value in sorted(self._values.items())
                if key.startswith(prefix)
            ]

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def close(self) -> None:
        """Nothing to release for an in-memory store."""

    def get_entry(self, name: str) -> InmemEntry:
        with self._lock:
            return self._entries.setdefault(name, InmemEntry())