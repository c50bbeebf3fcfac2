"""Per-direction green allocation across lanes and direction-level rollups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

from ..models import Lane, SignalTiming
from ..numeric import clamp, coefficient_of_variation, round_half_up
from .lane import (
    DISCHARGE_EFFICIENCY,
    SECONDS_PER_HOUR,
    SIMULATION_HORIZON_CYCLES,
    LaneTiming,
    lane_arrival_rate,
    lane_saturation,
    simulate_lane,
)

LANE_PRESSURE_PER_VEHICLE = 18
VC_CAP = 1.8
DELAY_CAP = 180
QUEUE_PRESSURE_CAP = 2


@dataclass(frozen=True, slots=True)
class LaneMetrics:
    """Rounded lane outcome as reported to consumers."""

    lane_type: str
    density: str
    initial_vehicles: int
    green_share: float
    avg_delay: float
    avg_queue: float
    max_queue: float
    throughput: float
    demand_rate: float
    volume_to_capacity: float
    queue_end: float
    wait_vehicle_seconds: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "laneType": self.lane_type,
            "density": self.density,
            "initialVehicles": self.initial_vehicles,
            "greenShare": self.green_share,
            "avgDelay": self.avg_delay,
            "avgQueue": self.avg_queue,
            "maxQueue": self.max_queue,
            "throughput": self.throughput,
            "demandRate": self.demand_rate,
            "volumeToCapacity": self.volume_to_capacity,
            "queueEnd": self.queue_end,
            "waitVehicleSeconds": self.wait_vehicle_seconds,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "LaneMetrics":
        return cls(
            lane_type=data["laneType"],  # type: ignore[arg-type]
            density=data["density"],  # type: ignore[arg-type]
            initial_vehicles=data["initialVehicles"],  # type: ignore[arg-type]
            green_share=data["greenShare"],  # type: ignore[arg-type]
            avg_delay=data["avgDelay"],  # type: ignore[arg-type]
            avg_queue=data["avgQueue"],  # type: ignore[arg-type]
            max_queue=data["maxQueue"],  # type: ignore[arg-type]
            throughput=data["throughput"],  # type: ignore[arg-type]
            demand_rate=data["demandRate"],  # type: ignore[arg-type]
            volume_to_capacity=data["volumeToCapacity"],  # type: ignore[arg-type]
            queue_end=data["queueEnd"],  # type: ignore[arg-type]
            wait_vehicle_seconds=data["waitVehicleSeconds"],  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class DirectionMetrics:
    """Lane rollup for one approach under a given timing.

    ``congestion_index`` and ``load_balance_score`` are integers in
    ``[0, 100]``; the remaining fields follow the lane metrics they sum.
    """

    timing: SignalTiming
    cycle_length: float
    avg_delay: float = 0.0
    queue_length: int = 0
    throughput: int = 0
    congestion_index: int = 0
    load_balance_score: int = 0
    total_vehicles: int = 0
    demand_rate: int = 0
    wait_vehicle_seconds: int = 0
    lane_breakdown: Tuple[LaneMetrics, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, object]:
        return {
            "avgDelay": self.avg_delay,
            "queueLength": self.queue_length,
            "throughput": self.throughput,
            "congestionIndex": self.congestion_index,
            "loadBalanceScore": self.load_balance_score,
            "totalVehicles": self.total_vehicles,
            "demandRate": self.demand_rate,
            "waitVehicleSeconds": self.wait_vehicle_seconds,
            "laneBreakdown": [lane.to_dict() for lane in self.lane_breakdown],
            "timing": self.timing.to_dict(),
            "cycleLength": self.cycle_length,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "DirectionMetrics":
        return cls(
            timing=SignalTiming.from_dict(data["timing"]),  # type: ignore[arg-type]
            cycle_length=data["cycleLength"],  # type: ignore[arg-type]
            avg_delay=data["avgDelay"],  # type: ignore[arg-type]
            queue_length=data["queueLength"],  # type: ignore[arg-type]
            throughput=data["throughput"],  # type: ignore[arg-type]
            congestion_index=data["congestionIndex"],  # type: ignore[arg-type]
            load_balance_score=data["loadBalanceScore"],  # type: ignore[arg-type]
            total_vehicles=data["totalVehicles"],  # type: ignore[arg-type]
            demand_rate=data["demandRate"],  # type: ignore[arg-type]
            wait_vehicle_seconds=data["waitVehicleSeconds"],  # type: ignore[arg-type]
            lane_breakdown=tuple(
                LaneMetrics.from_dict(lane) for lane in data["laneBreakdown"]  # type: ignore[union-attr]
            ),
        )


def lane_pressure(lane: Lane) -> float:
    return lane_arrival_rate(lane) + lane.vehicle_count * LANE_PRESSURE_PER_VEHICLE


def allocate_lane_shares(
    lanes: Sequence[Lane], direction_green: float, cycle_length: float
) -> List[LaneTiming]:
    """Split ``direction_green`` across ``lanes`` in proportion to lane pressure."""

    if not lanes:
        return []

    pressures = [lane_pressure(lane) for lane in lanes]
    total_pressure = sum(pressures)

    timings = []
    for lane, pressure in zip(lanes, pressures):
        share = pressure / total_pressure if total_pressure > 0 else 1 / len(lanes)
        green_seconds = direction_green * share
        saturation = lane_saturation(lane)
        timings.append(
            LaneTiming(
                share=share,
                green_seconds=green_seconds,
                service_per_cycle=saturation * green_seconds * DISCHARGE_EFFICIENCY / SECONDS_PER_HOUR,
                arrival_per_cycle=lane_arrival_rate(lane) / SECONDS_PER_HOUR * cycle_length,
                lane_saturation=saturation,
            )
        )
    return timings


def congestion_index(mean_vc: float, avg_delay: float, queue_pressure: float) -> int:
    """Blend V/C, delay and residual queue pressure into a 0-100 score."""

    score = (
        min(mean_vc, VC_CAP) / VC_CAP * 50
        + min(avg_delay, DELAY_CAP) / DELAY_CAP * 30
        + min(queue_pressure, QUEUE_PRESSURE_CAP) * 20
    )
    return int(clamp(round_half_up(score), 0, 100))


def load_balance_score(queues: Sequence[float], vc_ratios: Sequence[float]) -> int:
    """100 when every lane drains evenly; falls with queue and V/C dispersion."""

    dispersion = coefficient_of_variation(queues) * 50 + coefficient_of_variation(vc_ratios) * 50
    return int(clamp(round_half_up(100 - dispersion), 0, 100))


def simulate_direction(
    lanes: Sequence[Lane], timing: SignalTiming, cycle_length: float
) -> DirectionMetrics:
    """Simulate every lane of one approach and roll the results up."""

    if not lanes:
        return DirectionMetrics(timing=timing, cycle_length=cycle_length)

    lane_timings = allocate_lane_shares(lanes, timing.green, cycle_length)

    breakdown = []
    for lane, lane_timing in zip(lanes, lane_timings):
        result = simulate_lane(lane, lane_timing, cycle_length, SIMULATION_HORIZON_CYCLES)
        breakdown.append(
            LaneMetrics(
                lane_type=lane.lane_type,
                density=lane.density,
                initial_vehicles=lane.vehicle_count,
                green_share=round_half_up(lane_timing.share * 100, 1),
                avg_delay=round_half_up(result.avg_delay, 1),
                avg_queue=round_half_up(result.avg_queue, 1),
                max_queue=round_half_up(result.max_queue, 1),
                throughput=round_half_up(result.throughput_per_hour, 1),
                demand_rate=round_half_up(result.demand_rate, 1),
                volume_to_capacity=round_half_up(result.volume_to_capacity, 2),
                queue_end=round_half_up(result.queue_end, 1),
                wait_vehicle_seconds=result.wait_vehicle_seconds,
            )
        )

    total_demand = sum(lane.demand_rate for lane in breakdown)
    total_throughput = sum(lane.throughput for lane in breakdown)
    total_initial = sum(lane.initial_vehicles for lane in breakdown)
    total_queue_end = sum(lane.queue_end for lane in breakdown)
    total_wait = sum(lane.wait_vehicle_seconds for lane in breakdown)

    horizon_hours = SIMULATION_HORIZON_CYCLES * cycle_length / SECONDS_PER_HOUR
    avg_delay = total_wait / (total_throughput * horizon_hours) if total_throughput > 0 else 0.0
    mean_vc = sum(lane.volume_to_capacity for lane in breakdown) / len(breakdown)
    queue_pressure = total_queue_end / total_initial if total_initial > 0 else 0.0

    return DirectionMetrics(
        timing=timing,
        cycle_length=cycle_length,
        avg_delay=round_half_up(avg_delay, 1),
        queue_length=round_half_up(total_queue_end),
        throughput=round_half_up(total_throughput),
        congestion_index=congestion_index(mean_vc, avg_delay, queue_pressure),
        load_balance_score=load_balance_score(
            [lane.avg_queue for lane in breakdown],
            [lane.volume_to_capacity for lane in breakdown],
        ),
        total_vehicles=total_initial,
        demand_rate=round_half_up(total_demand),
        wait_vehicle_seconds=round_half_up(total_wait),
        lane_breakdown=tuple(breakdown),
    )
