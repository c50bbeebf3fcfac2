"""History repository persisted as a JSON document on disk."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List

from filelock import FileLock

from ..engine import SimulationResult
from .base import DEFAULT_CAPACITY, HISTORY_KEY, HistoryRepository

logger = logging.getLogger(__name__)


class JsonFileHistoryRepository(HistoryRepository):
    """Store results under :data:`HISTORY_KEY` in a JSON file.

    Every mutation is a read-modify-write guarded by a :class:`filelock.FileLock`
    (other processes) and a :class:`threading.Lock` (other threads), and the
    file is replaced atomically so readers never observe a partial write.

    Reads raise :class:`ValueError` for a corrupt document and
    :class:`OSError` when the file cannot be accessed; a missing file is an
    empty history. Appending over a corrupt document replaces it.
    """

    def __init__(
        self,
        path: str | Path,
        capacity: int = DEFAULT_CAPACITY,
        lock_timeout: float = 10.0,
    ) -> None:
        super().__init__(capacity)
        self.path = Path(path)
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)
        self._thread_lock = threading.Lock()

    def _read_raw(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError(f"History file {self.path} does not contain a JSON object")
        entries = document.get(HISTORY_KEY, [])
        if not isinstance(entries, list):
            raise ValueError(f"History entry {HISTORY_KEY!r} in {self.path} is not a list")
        return entries

    def _read_results(self) -> List[SimulationResult]:
        entries = self._read_raw()
        try:
            return [SimulationResult.from_dict(entry) for entry in entries[: self.capacity]]
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Malformed history entry in {self.path}: {exc}") from exc

    def _write_raw(self, entries: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({HISTORY_KEY: entries}, handle)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def append(self, result: SimulationResult) -> None:
        with self._thread_lock, self._file_lock:
            try:
                existing = self._read_results()
            except ValueError as exc:
                logger.warning("Discarding unreadable history in %s: %s", self.path, exc)
                existing = []
            entries = [result.to_dict()] + [entry.to_dict() for entry in existing]
            self._write_raw(entries[: self.capacity])
        logger.debug("Saved simulation %s to %s", result.id, self.path)

    def list(self) -> List[SimulationResult]:
        with self._thread_lock, self._file_lock:
            return self._read_results()

    def clear(self) -> None:
        with self._thread_lock, self._file_lock:
            self.path.unlink(missing_ok=True)
