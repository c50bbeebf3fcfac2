from pathlib import Path
import copy
import json
import random
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from signal_planner.engine import (
    AggregateMetrics,
    Improvements,
    SimulationResult,
    aggregate,
    compute_improvements,
    format_timestamp,
    make_result_id,
    percent_change,
    run_simulation,
)
from signal_planner.models import (
    DIRECTIONS,
    Configuration,
    Lane,
    SignalTiming,
    create_default_config,
    create_default_lane,
    create_default_signal_timing,
)
from signal_planner.normalizer import normalize_config
from signal_planner.presets import Preset, get_preset, load_presets
from signal_planner.simulation.direction import DirectionMetrics


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


IMPROVEMENT_FIELDS = {
    "delayReduction",
    "queueReduction",
    "throughputIncrease",
    "congestionReduction",
    "waitTimeReduction",
    "loadBalanceImprovement",
}


def test_percent_change_sign_conventions():
    assert percent_change(20, 10, reduction=True) == 50
    assert percent_change(1000, 1200) == 20
    assert percent_change(10, 15, reduction=True) == -50
    assert percent_change(80, 60) == -25
    assert percent_change(0, 25) == 0
    assert percent_change(0, 25, reduction=True) == 0


def test_compute_improvements_uses_each_metric_direction():
    before = AggregateMetrics(
        avg_delay=20,
        total_queue=100,
        total_throughput=1000,
        avg_congestion=60,
        avg_load_balance=50,
        total_wait_vehicle_seconds=4000,
    )
    after = AggregateMetrics(
        avg_delay=10,
        total_queue=75,
        total_throughput=1200,
        avg_congestion=45,
        avg_load_balance=60,
        total_wait_vehicle_seconds=5000,
    )

    assert compute_improvements(before, after) == Improvements(
        delay_reduction=50,
        queue_reduction=25,
        throughput_increase=20,
        congestion_reduction=25,
        wait_time_reduction=-25,
        load_balance_improvement=20,
    )


def test_aggregate_weights_delay_by_vehicles():
    timing = SignalTiming(green=20, yellow=4, red=66)
    metrics = {
        "north": DirectionMetrics(
            timing=timing,
            cycle_length=90,
            avg_delay=10.0,
            queue_length=4,
            throughput=500,
            congestion_index=40,
            load_balance_score=90,
            total_vehicles=10,
            demand_rate=400,
            wait_vehicle_seconds=1000,
        ),
        "south": DirectionMetrics(
            timing=timing,
            cycle_length=90,
            avg_delay=20.0,
            queue_length=7,
            throughput=300,
            congestion_index=61,
            load_balance_score=70,
            total_vehicles=30,
            demand_rate=350,
            wait_vehicle_seconds=2500,
        ),
    }

    result = aggregate(metrics)

    assert result.avg_delay == pytest.approx(17.5)
    assert result.total_queue == 11
    assert result.total_throughput == 800
    assert result.avg_congestion == 51
    assert result.avg_load_balance == 80
    assert result.total_wait_vehicle_seconds == 3500
    assert result.demand_rate == 750
    assert aggregate({}) == AggregateMetrics()


def test_result_identity_helpers():
    assert format_timestamp(0) == "1970-01-01T00:00:00.000Z"
    assert format_timestamp(1.5) == "1970-01-01T00:00:01.500Z"

    result_id = make_result_id(0, random.Random(1))
    assert result_id.startswith("0")
    assert len(result_id) == 7
    assert make_result_id(36.0, random.Random(1))[:2] == "rs"  # 36000 ms == "rs0" in base 36


def test_rush_hour_run_produces_complete_result():
    result = run_simulation(get_preset("rushHour").config)

    assert 48 <= result.config.optimized.cycle_length <= 170
    assert result.config.original.cycle_length == 120
    improvements = result.improvements.to_dict()
    assert set(improvements) == IMPROVEMENT_FIELDS
    assert all(isinstance(value, int) for value in improvements.values())
    assert set(result.before.per_direction) == set(DIRECTIONS)
    assert set(result.after.per_direction) == set(DIRECTIONS)


def test_passes_use_original_and_optimized_timing():
    result = run_simulation(get_preset("unevenFlow").config)

    for direction in DIRECTIONS:
        before = result.before.per_direction[direction]
        after = result.after.per_direction[direction]
        assert before.timing == result.config.original.signal_timing[direction]
        assert before.cycle_length == result.config.original.cycle_length
        assert after.timing == result.config.optimized.signal_timing[direction]
        assert after.cycle_length == result.config.optimized.cycle_length


def test_run_is_deterministic_apart_from_identity():
    clock = FakeClock(1_700_000_000.0)
    first = run_simulation(create_default_config(), time_func=clock, rng=random.Random(3))
    second = run_simulation(create_default_config(), time_func=clock, rng=random.Random(3))
    clock.advance(5)
    third = run_simulation(create_default_config(), time_func=clock, rng=random.Random(4))

    assert first == second
    assert third.id != first.id
    assert third.timestamp != first.timestamp
    assert third.before == first.before
    assert third.after == first.after
    assert third.improvements == first.improvements


def test_result_survives_json_round_trip():
    result = run_simulation(get_preset("rushHour").config, time_func=FakeClock(12.345))

    payload = json.loads(json.dumps(result.to_dict()))
    restored = SimulationResult.from_dict(payload)

    assert restored == result
    assert restored.to_dict() == result.to_dict()
    assert payload["timestamp"] == "1970-01-01T00:00:12.345Z"
    assert set(payload) == {
        "id",
        "timestamp",
        "config",
        "before",
        "after",
        "improvements",
        "optimization",
    }


def test_configuration_survives_json_round_trip():
    config = normalize_config({"cycleLength": 77.5, "signalTiming": {"north": {"green": 30.25}}})

    restored = Configuration.from_dict(json.loads(json.dumps(config.to_dict())))

    assert restored == config


@pytest.mark.parametrize(
    "raw",
    [None, "garbage", 42, {"lanes": {"north": "x"}}, {"signalTiming": []}, {"cycleLength": {}}],
)
def test_run_simulation_never_fails_on_malformed_input(raw):
    result = run_simulation(raw)

    assert result.config.original.cycle_length == 90
    assert set(result.improvements.to_dict()) == IMPROVEMENT_FIELDS


def test_run_simulation_leaves_raw_dict_untouched():
    raw = get_preset("normalDay").config.to_dict()
    snapshot = copy.deepcopy(raw)

    run_simulation(raw)

    assert raw == snapshot


def test_result_lanes_are_normalized_copy():
    result = run_simulation({"lanes": {"east": [{"vehicleCount": 999, "laneType": "bogus"}]}})

    east = result.config.lanes["east"]
    assert len(east) == 1
    assert east[0].vehicle_count == 250
    assert east[0].lane_type == "straight"
    assert result.before.per_direction["east"].total_vehicles == 250


def test_preset_catalog_contents():
    presets = load_presets()

    assert list(presets) == ["rushHour", "normalDay", "lightTraffic", "unevenFlow"]
    assert [preset.name for preset in presets.values()] == [
        "Rush Hour Peak",
        "Normal Midday",
        "Late Night",
        "Uneven Corridor",
    ]
    assert presets["normalDay"].config == create_default_config()
    assert presets["rushHour"].config.cycle_length == 120


def test_preset_requires_lanes_and_consistent_timing():
    config = create_default_config()
    with pytest.raises(ValueError):
        Preset(
            key="broken",
            name="Broken",
            description="no west lanes",
            config=Configuration(
                lanes={**config.lanes, "west": ()},
                signal_timing=config.signal_timing,
                cycle_length=config.cycle_length,
            ),
        )
    with pytest.raises(ValueError):
        Preset(
            key="broken",
            name="Broken",
            description="timing does not add up",
            config=Configuration(
                lanes=config.lanes,
                signal_timing={**config.signal_timing, "east": SignalTiming(20, 4, 10)},
                cycle_length=config.cycle_length,
            ),
        )
    with pytest.raises(KeyError):
        get_preset("weekend")


def test_default_factories():
    assert create_default_lane() == Lane(18, "straight", "moderate")

    timing = create_default_signal_timing(120)
    assert timing["north"] == SignalTiming(green=28, yellow=4, red=88)
    assert timing["east"] == SignalTiming(green=20, yellow=4, red=96)
    assert all(item.total == 120 for item in timing.values())
