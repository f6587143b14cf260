"""Storage interfaces used by the log tracker."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .structs import Log


class Entry(ABC):
    """An append-only sequence of logs belonging to one filter."""

    @abstractmethod
    def last_index(self) -> int:
        """Return the index one past the last stored log (0 when empty)."""

    @abstractmethod
    def store_logs(self, logs: Iterable[Log]) -> None:
        """Append logs after the last stored one."""

    @abstractmethod
    def remove_logs(self, index: int) -> None:
        """Remove every log from index onwards."""

    @abstractmethod
    def get_log(self, index: int) -> Log:
        """Return the log stored at index."""


class Store(ABC):
    """A key-value store that also holds one log entry per filter."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the value of key, or an empty string when it is unset."""

    @abstractmethod
    def list_prefix(self, prefix: str) -> list[str]:
        """Return the values of every key starting with prefix."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set key to value, replacing any earlier value."""

    @abstractmethod
    def close(self) -> None:
        """Release the resources held by the store."""

    @abstractmethod
    def get_entry(self, name: str) -> Entry:
        """Return the log entry called name, creating it when missing."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()