"""Runtime configuration for the signal planning engine."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .history.base import DEFAULT_CAPACITY, HISTORY_KEY

DEFAULT_HISTORY_PATH = Path("~/.signal_planner") / f"{HISTORY_KEY}.json"


@dataclass(slots=True)
class EngineConfig:
    """Runtime configuration for :class:`signal_planner.system.SignalPlanner`.

    Parameters
    ----------
    history_path:
        JSON file holding saved runs. ``None`` keeps history in memory only.
    history_capacity:
        Number of most recent runs retained.
    lock_timeout:
        Seconds to wait for the history file lock before giving up.
    log_level:
        Logging level name applied by the command line entry point.
    """

    history_path: str | Path | None = DEFAULT_HISTORY_PATH
    history_capacity: int = DEFAULT_CAPACITY
    lock_timeout: float = 10.0
    log_level: str = "INFO"

    def ensure_paths(self) -> None:
        """Expand the configured history path to an absolute :class:`~pathlib.Path`."""

        if self.history_path is not None:
            self.history_path = Path(self.history_path).expanduser().resolve()
