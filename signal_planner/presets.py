"""Named intersection presets that front ends can load verbatim."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .models import DIRECTIONS, Configuration, Lane, SignalTiming, create_default_config


@dataclass(frozen=True)
class Preset:
    """A complete, ready-to-run intersection configuration."""

    key: str
    name: str
    description: str
    config: Configuration

    def __post_init__(self) -> None:  # type: ignore[override]
        for direction in DIRECTIONS:
            lanes = self.config.lanes.get(direction)
            if not lanes or len(lanes) > 4:
                raise ValueError(f"Preset {self.key!r} needs 1-4 lanes for {direction}")
            timing = self.config.signal_timing.get(direction)
            if timing is None or timing.total != self.config.cycle_length:
                raise ValueError(
                    f"Preset {self.key!r} timing for {direction} must sum to the cycle length"
                )


def _timing(green: int, yellow: int, cycle_length: int) -> SignalTiming:
    return SignalTiming(green=green, yellow=yellow, red=cycle_length - green - yellow)


def load_presets() -> Dict[str, Preset]:
    """Return the preset catalog keyed by preset identifier, in display order."""

    rush_hour = Preset(
        key="rushHour",
        name="Rush Hour Peak",
        description="Heavy arrivals on all approaches with high residual queues",
        config=Configuration(
            lanes={
                "north": (Lane(52, "straight", "high"), Lane(24, "leftTurn", "high")),
                "south": (Lane(58, "straight", "gridlock"), Lane(20, "leftTurn", "high")),
                "east": (Lane(45, "straight", "high"), Lane(14, "rightTurn", "moderate")),
                "west": (Lane(40, "straight", "high"), Lane(12, "leftTurn", "moderate")),
            },
            signal_timing={
                "north": _timing(30, 5, 120),
                "south": _timing(30, 5, 120),
                "east": _timing(25, 5, 120),
                "west": _timing(25, 5, 120),
            },
            cycle_length=120,
        ),
    )

    normal_day = Preset(
        key="normalDay",
        name="Normal Midday",
        description="Balanced daytime traffic demand",
        config=create_default_config(),
    )

    light_traffic = Preset(
        key="lightTraffic",
        name="Late Night",
        description="Light traffic with short cycle demand",
        config=Configuration(
            lanes={
                "north": (Lane(6, "straight", "low"),),
                "south": (Lane(9, "straight", "low"),),
                "east": (Lane(4, "combined", "low"),),
                "west": (Lane(5, "combined", "low"),),
            },
            signal_timing={
                "north": _timing(18, 3, 64),
                "south": _timing(18, 3, 64),
                "east": _timing(14, 3, 64),
                "west": _timing(14, 3, 64),
            },
            cycle_length=64,
        ),
    )

    uneven_flow = Preset(
        key="unevenFlow",
        name="Uneven Corridor",
        description="North-South oversaturated while East-West remains light",
        config=Configuration(
            lanes={
                "north": (Lane(58, "straight", "gridlock"), Lane(28, "leftTurn", "high")),
                "south": (Lane(50, "straight", "high"), Lane(24, "leftTurn", "high")),
                "east": (Lane(10, "straight", "low"),),
                "west": (Lane(8, "combined", "low"),),
            },
            signal_timing={
                "north": _timing(25, 4, 100),
                "south": _timing(25, 4, 100),
                "east": _timing(21, 4, 100),
                "west": _timing(21, 4, 100),
            },
            cycle_length=100,
        ),
    )

    return {preset.key: preset for preset in (rush_hour, normal_day, light_traffic, uneven_flow)}


def get_preset(key: str) -> Preset:
    presets = load_presets()
    if key not in presets:
        raise KeyError(f"Unknown preset {key!r}; choose from {', '.join(presets)}")
    return presets[key]
