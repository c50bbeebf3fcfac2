"""Process-local history repository."""

from __future__ import annotations

import threading
from typing import List, TYPE_CHECKING

from .base import DEFAULT_CAPACITY, HistoryRepository

if TYPE_CHECKING:  # pragma: no cover - used only for typing
    from ..engine import SimulationResult


class InMemoryHistoryRepository(HistoryRepository):
    """Thread-safe list held in memory; lost when the process exits."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        super().__init__(capacity)
        self._lock = threading.Lock()
        self._entries: List["SimulationResult"] = []

    def append(self, result: "SimulationResult") -> None:
        with self._lock:
            self._entries.insert(0, result)
            del self._entries[self.capacity :]

    def list(self) -> List["SimulationResult"]:
        with self._lock:
            return self._entries.copy()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
