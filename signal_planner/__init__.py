"""Signal timing planner for a four-approach signalized intersection."""

from .config import EngineConfig
from .engine import SimulationResult, run_simulation
from .models import Configuration, Lane, SignalTiming, create_default_config
from .normalizer import normalize_config
from .optimizer import optimize_timing
from .presets import Preset, get_preset, load_presets
from .system import SignalPlanner

__all__ = [
    "Configuration",
    "EngineConfig",
    "Lane",
    "Preset",
    "SignalPlanner",
    "SignalTiming",
    "SimulationResult",
    "create_default_config",
    "get_preset",
    "load_presets",
    "normalize_config",
    "optimize_timing",
    "run_simulation",
]
