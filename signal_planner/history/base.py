"""History repository abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - used only for typing
    from ..engine import SimulationResult

HISTORY_KEY = "trafficSimHistory"
DEFAULT_CAPACITY = 20


class HistoryRepository(ABC):
    """Capped, most-recent-first store of :class:`SimulationResult` objects."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity

    @abstractmethod
    def append(self, result: "SimulationResult") -> None:
        """Insert ``result`` at the front, dropping entries beyond ``capacity``."""

    @abstractmethod
    def list(self) -> List["SimulationResult"]:
        """Return stored results, most recent first."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored result."""
