"""Chat history storage abstractions."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import List

from ..models import HistoryEntry


class HistoryStoreError(RuntimeError):
    """Raised when the history backend rejects a request."""


class HistoryStore(ABC):
    """Append-only log of chat exchanges."""

    @abstractmethod
    def add(self, entry: HistoryEntry) -> None:
        """Persist a history entry."""

    @abstractmethod
    def list_for(self, username: str) -> List[HistoryEntry]:
        """Return the entries of *username*, most recent first."""

    def close(self) -> None:
        """Release resources held by the backend."""

        return None


class InMemoryHistoryStore(HistoryStore):
    """Bounded in-process store, useful for tests and single-process runs."""

    def __init__(self, max_entries: int = 500) -> None:
        self._entries: List[HistoryEntry] = []
        self._max_entries = max_entries
        self._lock = threading.Lock()

    def add(self, entry: HistoryEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            self._prune()

    def list_for(self, username: str) -> List[HistoryEntry]:
        with self._lock:
            matches = [entry for entry in self._entries if entry.username == username]
        return sorted(matches, key=lambda entry: entry.created_at, reverse=True)

    def _prune(self) -> None:
        if self._max_entries <= 0:
            self._entries.clear()
            return
        overflow = len(self._entries) - self._max_entries
        if overflow > 0:
            self._entries = self._entries[overflow:]
