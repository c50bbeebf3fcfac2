"""Run orchestration: simulate current timing, optimise, simulate again and compare."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import random
import time
from typing import Any, Callable, Dict, Mapping, Tuple

from .models import (
    DIRECTIONS,
    Configuration,
    Direction,
    Lane,
    SignalTiming,
    lanes_from_dict,
    lanes_to_dict,
    timing_from_dict,
    timing_to_dict,
)
from .normalizer import normalize_config
from .numeric import round_half_up
from .optimizer import OptimizationDiagnostics, optimize_timing
from .simulation.direction import DirectionMetrics, simulate_direction

logger = logging.getLogger(__name__)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True, slots=True)
class AggregateMetrics:
    """Intersection-wide rollup of one simulation pass."""

    avg_delay: float = 0.0
    total_queue: int = 0
    total_throughput: int = 0
    avg_congestion: int = 0
    avg_load_balance: int = 0
    total_wait_vehicle_seconds: int = 0
    demand_rate: int = 0

    def to_dict(self) -> Dict[str, float]:
        return {
            "avgDelay": self.avg_delay,
            "totalQueue": self.total_queue,
            "totalThroughput": self.total_throughput,
            "avgCongestion": self.avg_congestion,
            "avgLoadBalance": self.avg_load_balance,
            "totalWaitVehicleSeconds": self.total_wait_vehicle_seconds,
            "demandRate": self.demand_rate,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, float]) -> "AggregateMetrics":
        return cls(
            avg_delay=data["avgDelay"],
            total_queue=data["totalQueue"],  # type: ignore[arg-type]
            total_throughput=data["totalThroughput"],  # type: ignore[arg-type]
            avg_congestion=data["avgCongestion"],  # type: ignore[arg-type]
            avg_load_balance=data["avgLoadBalance"],  # type: ignore[arg-type]
            total_wait_vehicle_seconds=data["totalWaitVehicleSeconds"],  # type: ignore[arg-type]
            demand_rate=data["demandRate"],  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class Improvements:
    """Integer percentage changes; positive values always mean "better"."""

    delay_reduction: int = 0
    queue_reduction: int = 0
    throughput_increase: int = 0
    congestion_reduction: int = 0
    wait_time_reduction: int = 0
    load_balance_improvement: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "delayReduction": self.delay_reduction,
            "queueReduction": self.queue_reduction,
            "throughputIncrease": self.throughput_increase,
            "congestionReduction": self.congestion_reduction,
            "waitTimeReduction": self.wait_time_reduction,
            "loadBalanceImprovement": self.load_balance_improvement,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> "Improvements":
        return cls(
            delay_reduction=data["delayReduction"],
            queue_reduction=data["queueReduction"],
            throughput_increase=data["throughputIncrease"],
            congestion_reduction=data["congestionReduction"],
            wait_time_reduction=data["waitTimeReduction"],
            load_balance_improvement=data["loadBalanceImprovement"],
        )


@dataclass(frozen=True, slots=True)
class PassResult:
    per_direction: Mapping[Direction, DirectionMetrics]
    aggregate: AggregateMetrics

    def to_dict(self) -> Dict[str, object]:
        return {
            "perDirection": {
                direction: metrics.to_dict() for direction, metrics in self.per_direction.items()
            },
            "aggregate": self.aggregate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PassResult":
        return cls(
            per_direction={
                direction: DirectionMetrics.from_dict(metrics)
                for direction, metrics in data["perDirection"].items()
            },
            aggregate=AggregateMetrics.from_dict(data["aggregate"]),
        )


@dataclass(frozen=True, slots=True)
class TimingPlan:
    signal_timing: Mapping[Direction, SignalTiming]
    cycle_length: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "signalTiming": timing_to_dict(self.signal_timing),
            "cycleLength": self.cycle_length,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimingPlan":
        return cls(
            signal_timing=timing_from_dict(data["signalTiming"]),
            cycle_length=data["cycleLength"],
        )


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Lanes plus the original and optimised timing plans of a run."""

    lanes: Mapping[Direction, Tuple[Lane, ...]]
    original: TimingPlan
    optimized: TimingPlan

    def to_dict(self) -> Dict[str, object]:
        return {
            "lanes": lanes_to_dict(self.lanes),
            "original": self.original.to_dict(),
            "optimized": self.optimized.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        return cls(
            lanes=lanes_from_dict(data["lanes"]),
            original=TimingPlan.from_dict(data["original"]),
            optimized=TimingPlan.from_dict(data["optimized"]),
        )


@dataclass(frozen=True, slots=True)
class SimulationResult:
    """Immutable outcome of :func:`run_simulation`.

    Serialises to the JSON shape consumed by dashboards and the history
    store via :meth:`to_dict`; :meth:`from_dict` restores an equal object.
    """

    id: str
    timestamp: str
    config: RunConfig
    before: PassResult
    after: PassResult
    improvements: Improvements
    optimization: OptimizationDiagnostics

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "config": self.config.to_dict(),
            "before": self.before.to_dict(),
            "after": self.after.to_dict(),
            "improvements": self.improvements.to_dict(),
            "optimization": self.optimization.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationResult":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            config=RunConfig.from_dict(data["config"]),
            before=PassResult.from_dict(data["before"]),
            after=PassResult.from_dict(data["after"]),
            improvements=Improvements.from_dict(data["improvements"]),
            optimization=OptimizationDiagnostics.from_dict(data["optimization"]),
        )


def aggregate(metrics: Mapping[str, DirectionMetrics]) -> AggregateMetrics:
    """Vehicle-weighted delay plus summed and averaged direction metrics."""

    if not metrics:
        return AggregateMetrics()

    values = list(metrics.values())
    total_vehicles = sum(item.total_vehicles for item in values)
    weighted_delay = sum(item.avg_delay * item.total_vehicles for item in values)

    return AggregateMetrics(
        avg_delay=round_half_up(weighted_delay / max(total_vehicles, 1), 1),
        total_queue=round_half_up(sum(item.queue_length for item in values)),
        total_throughput=round_half_up(sum(item.throughput for item in values)),
        avg_congestion=round_half_up(sum(item.congestion_index for item in values) / len(values)),
        avg_load_balance=round_half_up(sum(item.load_balance_score for item in values) / len(values)),
        total_wait_vehicle_seconds=round_half_up(sum(item.wait_vehicle_seconds for item in values)),
        demand_rate=round_half_up(sum(item.demand_rate for item in values)),
    )


def percent_change(before: float, after: float, reduction: bool = False) -> int:
    """Integer percent change from ``before`` to ``after``.

    With ``reduction`` a drop counts as positive. Returns 0 when ``before``
    is 0.
    """

    if not before:
        return 0
    ratio = after / before
    raw = (1 - ratio) * 100 if reduction else (ratio - 1) * 100
    return round_half_up(raw)


def compute_improvements(before: AggregateMetrics, after: AggregateMetrics) -> Improvements:
    return Improvements(
        delay_reduction=percent_change(before.avg_delay, after.avg_delay, reduction=True),
        queue_reduction=percent_change(before.total_queue, after.total_queue, reduction=True),
        throughput_increase=percent_change(before.total_throughput, after.total_throughput),
        congestion_reduction=percent_change(
            before.avg_congestion, after.avg_congestion, reduction=True
        ),
        wait_time_reduction=percent_change(
            before.total_wait_vehicle_seconds, after.total_wait_vehicle_seconds, reduction=True
        ),
        load_balance_improvement=percent_change(before.avg_load_balance, after.avg_load_balance),
    )


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def make_result_id(now: float, rng: random.Random) -> str:
    """Millisecond timestamp in base 36 followed by six random base-36 characters."""

    suffix = "".join(rng.choice(_BASE36) for _ in range(6))
    return f"{_to_base36(int(now * 1000))}{suffix}"


def format_timestamp(now: float) -> str:
    moment = datetime.fromtimestamp(now, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def simulate_pass(
    config: Configuration,
    signal_timing: Mapping[str, SignalTiming],
    cycle_length: float,
) -> PassResult:
    per_direction = {
        direction: simulate_direction(config.lanes[direction], signal_timing[direction], cycle_length)
        for direction in DIRECTIONS
    }
    return PassResult(per_direction=per_direction, aggregate=aggregate(per_direction))


def run_simulation(
    raw_config: Any,
    *,
    time_func: Callable[[], float] | None = None,
    rng: random.Random | None = None,
) -> SimulationResult:
    """Simulate ``raw_config`` as given and under an optimised plan.

    ``raw_config`` is normalised first, so any input is accepted. Only the
    result ``id`` and ``timestamp`` depend on ``time_func`` and ``rng``;
    everything else is a pure function of the configuration.
    """

    config = normalize_config(raw_config)

    before = simulate_pass(config, config.signal_timing, config.cycle_length)
    optimized = optimize_timing(config)
    after = simulate_pass(config, optimized.timing, optimized.cycle_length)
    improvements = compute_improvements(before.aggregate, after.aggregate)

    now = (time_func or time.time)()
    result = SimulationResult(
        id=make_result_id(now, rng or random.Random()),
        timestamp=format_timestamp(now),
        config=RunConfig(
            lanes=config.lanes,
            original=TimingPlan(config.signal_timing, config.cycle_length),
            optimized=TimingPlan(optimized.timing, optimized.cycle_length),
        ),
        before=before,
        after=after,
        improvements=improvements,
        optimization=optimized.diagnostics,
    )
    logger.info(
        "Simulation %s: cycle %ss -> %ss, avg delay %.1fs -> %.1fs",
        result.id,
        config.cycle_length,
        optimized.cycle_length,
        before.aggregate.avg_delay,
        after.aggregate.avg_delay,
    )
    return result
