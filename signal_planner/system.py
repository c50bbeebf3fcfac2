"""High level facade tying the engine to a history store."""

from __future__ import annotations

import logging
from typing import Any, List

from .config import EngineConfig
from .engine import SimulationResult, run_simulation
from .history.base import HistoryRepository
from .history.json_file import JsonFileHistoryRepository
from .history.memory import InMemoryHistoryRepository
from .history.service import clear_history, get_history, save_result

logger = logging.getLogger(__name__)


def build_repository(config: EngineConfig) -> HistoryRepository:
    """Create the history repository described by ``config``."""

    config.ensure_paths()
    if config.history_path is None:
        return InMemoryHistoryRepository(capacity=config.history_capacity)
    return JsonFileHistoryRepository(
        config.history_path,
        capacity=config.history_capacity,
        lock_timeout=config.lock_timeout,
    )


class SignalPlanner:
    """Main entry point for front ends: run simulations and manage history."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        repository: HistoryRepository | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.repository = repository or build_repository(self.config)

    def run(self, raw_config: Any, save: bool = False) -> SimulationResult:
        """Simulate ``raw_config`` and optionally record the result."""

        result = run_simulation(raw_config)
        if save and not save_result(result, self.repository):
            logger.info("Simulation %s completed but was not stored", result.id)
        return result

    def history(self) -> List[SimulationResult]:
        return get_history(self.repository)

    def clear_history(self) -> None:
        clear_history(self.repository)
