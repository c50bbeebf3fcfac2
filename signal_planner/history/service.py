"""Fail-soft helpers used by front ends to persist and browse past runs.

Simulation never depends on storage: when the repository is unavailable or
its contents are corrupt these helpers log a warning and degrade to a no-op
or an empty history instead of raising.
"""

from __future__ import annotations

import logging
from typing import List

from filelock import Timeout

from ..engine import SimulationResult
from .base import HistoryRepository

logger = logging.getLogger(__name__)

_STORAGE_ERRORS = (OSError, ValueError, Timeout)


def save_result(result: SimulationResult, repository: HistoryRepository) -> bool:
    """Append ``result`` to ``repository``; return ``False`` if the store was unavailable."""

    try:
        repository.append(result)
    except _STORAGE_ERRORS as exc:
        logger.warning("Could not save simulation %s to history: %s", result.id, exc)
        return False
    return True


def get_history(repository: HistoryRepository) -> List[SimulationResult]:
    try:
        return repository.list()
    except _STORAGE_ERRORS as exc:
        logger.warning("History unavailable, returning an empty list: %s", exc)
        return []


def clear_history(repository: HistoryRepository) -> None:
    try:
        repository.clear()
    except _STORAGE_ERRORS as exc:
        logger.warning("Could not clear history: %s", exc)
