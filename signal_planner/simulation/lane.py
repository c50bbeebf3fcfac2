"""Cycle-granular queue simulation for a single approach lane."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import DENSITY_LEVELS, SATURATION_FLOW_RATES, Lane

SIMULATION_HORIZON_CYCLES = 12
DISCHARGE_EFFICIENCY = 0.92
ARRIVAL_FACTOR = 0.34
# V/C reported for a lane that receives no service capacity at all.
OVERSATURATED_VC = 1.5
SECONDS_PER_HOUR = 3600


def lane_saturation(lane: Lane) -> float:
    """Saturation flow (veh/h of green) after the density penalty."""

    base = SATURATION_FLOW_RATES.get(lane.lane_type, SATURATION_FLOW_RATES["straight"])
    density = DENSITY_LEVELS.get(lane.density, DENSITY_LEVELS["moderate"])
    return base * density.saturation_penalty


def lane_arrival_rate(lane: Lane) -> float:
    """Arrival rate in vehicles per hour."""

    base = SATURATION_FLOW_RATES.get(lane.lane_type, SATURATION_FLOW_RATES["straight"])
    density = DENSITY_LEVELS.get(lane.density, DENSITY_LEVELS["moderate"])
    return base * density.arrival_multiplier * ARRIVAL_FACTOR


@dataclass(slots=True)
class LaneTiming:
    """Share of the direction's green assigned to one lane, in per-cycle units."""

    share: float
    green_seconds: float
    service_per_cycle: float
    arrival_per_cycle: float
    lane_saturation: float


@dataclass(slots=True)
class LaneSimulation:
    """Raw (unrounded) outcome of :func:`simulate_lane`."""

    avg_delay: float
    avg_queue: float
    max_queue: float
    throughput_per_hour: float
    demand_rate: float
    capacity_rate: float
    volume_to_capacity: float
    queue_end: float
    wait_vehicle_seconds: float


def simulate_lane(
    lane: Lane,
    timing: LaneTiming,
    cycle_length: float,
    horizon_cycles: int = SIMULATION_HORIZON_CYCLES,
) -> LaneSimulation:
    """Run a deterministic D/D/1-style queue over ``horizon_cycles`` cycles.

    Each cycle the lane receives ``timing.arrival_per_cycle`` new vehicles and
    discharges at most ``timing.service_per_cycle``. Waiting time is the
    trapezoidal area under the queue curve; delay divides it by departures.
    """

    queue = float(lane.vehicle_count)
    max_queue = queue
    total_wait = 0.0
    total_departed = 0.0
    queue_sum = 0.0

    for _ in range(horizon_cycles):
        queue_start = queue
        demand = queue_start + timing.arrival_per_cycle
        discharged = min(demand, timing.service_per_cycle)
        queue = max(demand - discharged, 0.0)

        total_departed += discharged
        max_queue = max(max_queue, queue)
        total_wait += ((queue_start + queue) / 2) * cycle_length
        queue_sum += queue

    per_hour = SECONDS_PER_HOUR / cycle_length
    demand_rate = timing.arrival_per_cycle * per_hour
    capacity_rate = timing.service_per_cycle * per_hour

    return LaneSimulation(
        avg_delay=total_wait / total_departed if total_departed > 0 else 0.0,
        avg_queue=queue_sum / horizon_cycles,
        max_queue=max_queue,
        throughput_per_hour=total_departed * SECONDS_PER_HOUR / (cycle_length * horizon_cycles),
        demand_rate=demand_rate,
        capacity_rate=capacity_rate,
        volume_to_capacity=demand_rate / capacity_rate if capacity_rate > 0 else OVERSATURATED_VC,
        queue_end=queue,
        wait_vehicle_seconds=total_wait,
    )
