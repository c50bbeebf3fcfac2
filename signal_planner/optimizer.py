"""Webster-style cycle length and green split optimisation."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Mapping, Sequence

from .models import DIRECTIONS, Configuration, Direction, Lane, SignalTiming
from .normalizer import MAX_CYCLE, MAX_YELLOW, MIN_CYCLE, MIN_GREEN, MIN_RED, MIN_YELLOW
from .numeric import clamp, round_half_up
from .simulation.lane import lane_arrival_rate, lane_saturation

logger = logging.getLogger(__name__)

DEMAND_PER_VEHICLE = 15
CAPACITY_HEADROOM = 1.05
MAX_CRITICAL_RATIO = 0.92
MIN_WEBSTER_DENOMINATOR = 0.08


@dataclass(frozen=True, slots=True)
class OptimizationDiagnostics:
    """Intermediate optimizer values exposed for inspection only."""

    total_critical_ratio: float
    usable_green: int
    lost_time: float
    directional_demand: Mapping[Direction, int]

    def to_dict(self) -> Dict[str, object]:
        return {
            "totalCriticalRatio": self.total_critical_ratio,
            "usableGreen": self.usable_green,
            "lostTime": self.lost_time,
            "directionalDemand": dict(self.directional_demand),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "OptimizationDiagnostics":
        return cls(
            total_critical_ratio=data["totalCriticalRatio"],  # type: ignore[arg-type]
            usable_green=data["usableGreen"],  # type: ignore[arg-type]
            lost_time=data["lostTime"],  # type: ignore[arg-type]
            directional_demand=dict(data["directionalDemand"]),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class OptimizedTiming:
    cycle_length: int
    timing: Mapping[Direction, SignalTiming]
    diagnostics: OptimizationDiagnostics


def direction_demand(lanes: Sequence[Lane]) -> float:
    """Sum of lane arrival rates plus a per-queued-vehicle demand term."""

    return sum(lane_arrival_rate(lane) + lane.vehicle_count * DEMAND_PER_VEHICLE for lane in lanes)


def webster_cycle(total_lost_time: float, total_critical_ratio: float) -> float:
    """Webster's optimal cycle with the ratio sum capped and the denominator floored.

    The cap keeps oversaturated intersections from producing negative or
    unbounded cycles.
    """

    denominator = max(1 - min(total_critical_ratio, MAX_CRITICAL_RATIO), MIN_WEBSTER_DENOMINATOR)
    return (1.5 * total_lost_time + 5) / denominator


def optimize_timing(config: Configuration) -> OptimizedTiming:
    """Derive a new cycle length and per-direction split from directional demand.

    ``config`` must already be normalised. Green is handed out in the fixed
    direction order; each direction is capped so that every later direction
    can still receive :data:`MIN_GREEN`.
    """

    demands: Dict[str, float] = {}
    critical_ratios: Dict[str, float] = {}
    for direction in DIRECTIONS:
        lanes = config.lanes.get(direction, ())
        demand = direction_demand(lanes)
        base_capacity = sum(lane_saturation(lane) for lane in lanes)
        demands[direction] = demand
        critical_ratios[direction] = (
            demand / (base_capacity * CAPACITY_HEADROOM) if base_capacity > 0 else 0.0
        )

    total_critical_ratio = sum(critical_ratios.values())
    avg_yellow = sum(
        config.signal_timing[direction].yellow if direction in config.signal_timing else MIN_YELLOW
        for direction in DIRECTIONS
    ) / len(DIRECTIONS)
    total_lost_time = (avg_yellow + 1) * len(DIRECTIONS)

    proposed_cycle = webster_cycle(total_lost_time, total_critical_ratio)
    cycle_length = int(clamp(round_half_up(proposed_cycle), MIN_CYCLE, MAX_CYCLE))
    usable_green = max(cycle_length - round_half_up(total_lost_time), len(DIRECTIONS) * MIN_GREEN)
    total_demand = sum(demands.values())

    timing: Dict[Direction, SignalTiming] = {}
    allocated = 0
    for index, direction in enumerate(DIRECTIONS):
        weight = demands[direction] / total_demand if total_demand > 0 else 1 / len(DIRECTIONS)
        proposed_green = max(round_half_up(usable_green * weight), MIN_GREEN)

        remaining = len(DIRECTIONS) - index - 1
        max_current = usable_green - allocated - remaining * MIN_GREEN
        green = int(clamp(proposed_green, MIN_GREEN, max(max_current, MIN_GREEN)))

        current = config.signal_timing.get(direction)
        yellow = int(
            clamp(round_half_up(current.yellow if current else MIN_YELLOW), MIN_YELLOW, MAX_YELLOW)
        )
        red = max(cycle_length - green - yellow, MIN_RED)

        timing[direction] = SignalTiming(green=green, yellow=yellow, red=red)
        allocated += green

    diagnostics = OptimizationDiagnostics(
        total_critical_ratio=round_half_up(total_critical_ratio, 2),
        usable_green=usable_green,
        lost_time=round_half_up(total_lost_time, 1),
        directional_demand={direction: round_half_up(demands[direction]) for direction in DIRECTIONS},
    )
    logger.debug(
        "Optimised cycle %ss (proposed %.1fs, critical ratio %.2f, usable green %ss)",
        cycle_length,
        proposed_cycle,
        total_critical_ratio,
        usable_green,
    )
    return OptimizedTiming(cycle_length=cycle_length, timing=timing, diagnostics=diagnostics)
