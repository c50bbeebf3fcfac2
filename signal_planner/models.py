"""Domain catalogs, value records and default factories for the intersection model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Mapping, Tuple

Direction = Literal["north", "south", "east", "west"]
LaneType = Literal["straight", "leftTurn", "rightTurn", "combined"]
DensityName = Literal["low", "moderate", "high", "gridlock"]

DIRECTIONS: Tuple[Direction, ...] = ("north", "south", "east", "west")

# Base saturation flow in vehicles per hour of green, before the density penalty.
SATURATION_FLOW_RATES: Dict[str, float] = {
    "straight": 1800,
    "leftTurn": 1350,
    "rightTurn": 1550,
    "combined": 1650,
}


@dataclass(frozen=True, slots=True)
class DensityLevel:
    """Static coefficients attached to a traffic density level."""

    label: str
    arrival_multiplier: float
    saturation_penalty: float
    color: str


@dataclass(frozen=True, slots=True)
class LaneTypeInfo:
    label: str
    icon: str


DENSITY_LEVELS: Dict[str, DensityLevel] = {
    "low": DensityLevel("Low", 0.4, 0.95, "#7ae582"),
    "moderate": DensityLevel("Moderate", 0.65, 0.9, "#ffd166"),
    "high": DensityLevel("High", 0.9, 0.82, "#f8961e"),
    "gridlock": DensityLevel("Gridlock", 1.15, 0.72, "#ef476f"),
}

LANE_TYPES: Dict[str, LaneTypeInfo] = {
    "straight": LaneTypeInfo("Straight", "ST"),
    "leftTurn": LaneTypeInfo("Left Turn", "LT"),
    "rightTurn": LaneTypeInfo("Right Turn", "RT"),
    "combined": LaneTypeInfo("Combined", "CB"),
}

DIRECTION_LABELS: Dict[str, str] = {
    "north": "North",
    "south": "South",
    "east": "East",
    "west": "West",
}

DIRECTION_COLORS: Dict[str, str] = {
    "north": "#5bc0eb",
    "south": "#ff7f50",
    "east": "#70c1b3",
    "west": "#f4a261",
}


@dataclass(frozen=True, slots=True)
class Lane:
    """A single approach lane with its queued vehicles and traffic character."""

    vehicle_count: int = 0
    lane_type: LaneType = "straight"
    density: DensityName = "low"

    def to_dict(self) -> Dict[str, object]:
        return {
            "vehicleCount": self.vehicle_count,
            "laneType": self.lane_type,
            "density": self.density,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Lane":
        return cls(
            vehicle_count=data["vehicleCount"],  # type: ignore[arg-type]
            lane_type=data["laneType"],  # type: ignore[arg-type]
            density=data["density"],  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class SignalTiming:
    """Green, yellow and red durations (seconds) of one approach."""

    green: float
    yellow: float
    red: float

    @property
    def total(self) -> float:
        return self.green + self.yellow + self.red

    def to_dict(self) -> Dict[str, float]:
        return {"green": self.green, "yellow": self.yellow, "red": self.red}

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> "SignalTiming":
        return cls(green=data["green"], yellow=data["yellow"], red=data["red"])


@dataclass(frozen=True, slots=True)
class Configuration:
    """Root entity: lanes and signal timing for the four approaches.

    Attributes
    ----------
    lanes:
        Lane tuple per direction (one to four lanes once normalised).
    signal_timing:
        Timing per direction. After normalisation every entry sums to
        ``cycle_length``.
    cycle_length:
        Signal cycle in seconds.
    """

    lanes: Mapping[Direction, Tuple[Lane, ...]]
    signal_timing: Mapping[Direction, SignalTiming]
    cycle_length: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "lanes": lanes_to_dict(self.lanes),
            "signalTiming": timing_to_dict(self.signal_timing),
            "cycleLength": self.cycle_length,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Configuration":
        return cls(
            lanes=lanes_from_dict(data["lanes"]),  # type: ignore[arg-type]
            signal_timing=timing_from_dict(data["signalTiming"]),  # type: ignore[arg-type]
            cycle_length=data["cycleLength"],  # type: ignore[arg-type]
        )


def lanes_to_dict(lanes: Mapping[str, Tuple[Lane, ...]]) -> Dict[str, list]:
    return {direction: [lane.to_dict() for lane in lanes[direction]] for direction in lanes}


def lanes_from_dict(data: Mapping[str, list]) -> Dict[str, Tuple[Lane, ...]]:
    return {direction: tuple(Lane.from_dict(lane) for lane in data[direction]) for direction in data}


def timing_to_dict(timing: Mapping[str, SignalTiming]) -> Dict[str, Dict[str, float]]:
    return {direction: timing[direction].to_dict() for direction in timing}


def timing_from_dict(data: Mapping[str, Mapping[str, float]]) -> Dict[str, SignalTiming]:
    return {direction: SignalTiming.from_dict(data[direction]) for direction in data}


def create_default_lane() -> Lane:
    return Lane(vehicle_count=18, lane_type="straight", density="moderate")


def create_default_signal_timing(cycle_length: float = 96) -> Dict[Direction, SignalTiming]:
    """Return the stock split: 28s green on north/south, 20s on east/west."""

    return {
        "north": SignalTiming(green=28, yellow=4, red=cycle_length - 32),
        "south": SignalTiming(green=28, yellow=4, red=cycle_length - 32),
        "east": SignalTiming(green=20, yellow=4, red=cycle_length - 24),
        "west": SignalTiming(green=20, yellow=4, red=cycle_length - 24),
    }


def create_default_config() -> Configuration:
    cycle_length = 96
    return Configuration(
        lanes={
            "north": (
                Lane(24, "straight", "moderate"),
                Lane(10, "leftTurn", "moderate"),
            ),
            "south": (
                Lane(22, "straight", "moderate"),
                Lane(12, "leftTurn", "high"),
            ),
            "east": (
                Lane(30, "straight", "high"),
                Lane(8, "rightTurn", "moderate"),
            ),
            "west": (Lane(14, "straight", "low"),),
        },
        signal_timing=create_default_signal_timing(cycle_length),
        cycle_length=cycle_length,
    )
