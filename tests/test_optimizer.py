from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from signal_planner.models import DIRECTIONS, Lane, SignalTiming
from signal_planner.normalizer import normalize_config
from signal_planner.optimizer import direction_demand, optimize_timing, webster_cycle
from signal_planner.presets import get_preset, load_presets


def _skewed_config():
    return normalize_config(
        {
            "cycleLength": 90,
            "lanes": {
                "north": [{"vehicleCount": 250, "laneType": "straight", "density": "gridlock"}] * 4,
                "south": [{"vehicleCount": 0, "laneType": "rightTurn", "density": "low"}],
                "east": [{"vehicleCount": 0, "laneType": "rightTurn", "density": "low"}],
                "west": [{"vehicleCount": 0, "laneType": "rightTurn", "density": "low"}],
            },
            "signalTiming": {direction: {"green": 20, "yellow": 8} for direction in DIRECTIONS},
        }
    )


def test_direction_demand_adds_queued_vehicles():
    lanes = [Lane(10, "straight", "low"), Lane(0, "leftTurn", "high")]

    expected = 1800 * 0.4 * 0.34 + 150 + 1350 * 0.9 * 0.34
    assert direction_demand(lanes) == pytest.approx(expected)
    assert direction_demand([]) == 0


def test_webster_cycle_is_bounded_under_oversaturation():
    assert webster_cycle(16, 0.5) == pytest.approx(29 / 0.5)
    assert webster_cycle(24, 2.0) == pytest.approx(41 / 0.08)
    assert webster_cycle(24, 0.95) == webster_cycle(24, 0.92)


def test_light_traffic_plan_matches_webster_split():
    optimized = optimize_timing(normalize_config(get_preset("lightTraffic").config))

    assert optimized.cycle_length == 117
    assert optimized.diagnostics.total_critical_ratio == 0.75
    assert optimized.diagnostics.lost_time == 16
    assert optimized.diagnostics.usable_green == 101
    assert {direction: optimized.timing[direction].green for direction in DIRECTIONS} == {
        "north": 26,
        "south": 30,
        "east": 22,
        "west": 23,
    }
    assert optimized.timing["north"] == SignalTiming(green=26, yellow=3, red=88)


def test_rush_hour_hits_cycle_ceiling():
    optimized = optimize_timing(normalize_config(get_preset("rushHour").config))

    assert optimized.cycle_length == 170
    assert optimized.diagnostics.lost_time == 24
    assert optimized.diagnostics.usable_green == 146
    assert optimized.diagnostics.total_critical_ratio > 0.92
    assert set(optimized.diagnostics.directional_demand) == set(DIRECTIONS)


@pytest.mark.parametrize(
    "config",
    [normalize_config(preset.config) for preset in load_presets().values()]
    + [_skewed_config(), normalize_config({})],
)
def test_optimized_plan_is_always_feasible(config):
    optimized = optimize_timing(config)
    usable = optimized.diagnostics.usable_green

    assert 48 <= optimized.cycle_length <= 170
    assert sum(optimized.timing[direction].green for direction in DIRECTIONS) <= usable
    for direction in DIRECTIONS:
        timing = optimized.timing[direction]
        assert timing.green >= 8
        assert 3 <= timing.yellow <= 8
        assert timing.red >= 1
        assert timing.green + timing.yellow + timing.red == optimized.cycle_length


def test_skewed_demand_keeps_minimum_green_for_later_directions():
    optimized = optimize_timing(_skewed_config())
    usable = optimized.diagnostics.usable_green

    assert optimized.timing["north"].green == usable - 3 * 8
    for direction in ("south", "east", "west"):
        assert optimized.timing[direction].green == 8
    assert optimized.timing["north"].yellow == 8


def test_optimizer_does_not_modify_input_configuration():
    config = normalize_config(get_preset("unevenFlow").config)
    before = config.to_dict()

    optimize_timing(config)

    assert config.to_dict() == before
