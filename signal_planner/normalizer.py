"""Turn arbitrary, possibly partial configuration input into a valid :class:`Configuration`."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, Mapping, Tuple

from .models import (
    DENSITY_LEVELS,
    DIRECTIONS,
    SATURATION_FLOW_RATES,
    Configuration,
    Lane,
    SignalTiming,
)
from .numeric import clamp, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CYCLE = 90
MIN_CYCLE = 48
MAX_CYCLE = 170
MIN_GREEN = 8
MAX_GREEN = 130
MIN_YELLOW = 3
MAX_YELLOW = 8
MIN_RED = 1
MAX_LANES = 4
MAX_VEHICLES = 250


def parse_number(value: Any, fallback: float) -> float:
    """Return ``value`` as a finite float, or ``fallback`` when it is not one.

    Numbers and numeric strings are accepted; booleans, ``None``, NaN and
    infinities fall back.
    """

    if isinstance(value, bool):
        return float(fallback)
    if not isinstance(value, (int, float, str)):
        return float(fallback)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return float(fallback)
    if not math.isfinite(number):
        return float(fallback)
    return number


def _tidy(value: float) -> float:
    # whole seconds serialise as integers
    if float(value).is_integer():
        return int(value)
    return value


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, (Configuration, Lane, SignalTiming)):
        return value.to_dict()
    if isinstance(value, Mapping):
        return value
    return {}


def normalize_lane(raw: Any) -> Lane:
    data = _as_mapping(raw)
    count = clamp(parse_number(data.get("vehicleCount"), 0), 0, MAX_VEHICLES)
    lane_type = data.get("laneType")
    density = data.get("density")
    if not isinstance(lane_type, str) or lane_type not in SATURATION_FLOW_RATES:
        logger.debug("Unknown lane type %r replaced with 'straight'", lane_type)
        lane_type = "straight"
    if not isinstance(density, str) or density not in DENSITY_LEVELS:
        logger.debug("Unknown density %r replaced with 'moderate'", density)
        density = "moderate"
    return Lane(vehicle_count=round_half_up(count), lane_type=lane_type, density=density)


def normalize_lanes(raw: Any) -> Tuple[Lane, ...]:
    """Normalise one direction's lane list; empty or missing lists get a single idle lane."""

    if not isinstance(raw, (list, tuple)) or not raw:
        return (Lane(vehicle_count=0, lane_type="straight", density="low"),)
    return tuple(normalize_lane(lane) for lane in raw[:MAX_LANES])


def normalize_timing(raw: Any, cycle_length: float) -> SignalTiming:
    """Clamp a direction's timing so that ``green + yellow + red == cycle_length``.

    Yellow is resolved to its bounds first because it caps green; red is
    always derived last so the sum holds without iteration.
    """

    data = _as_mapping(raw)
    yellow = clamp(parse_number(data.get("yellow"), MIN_YELLOW), MIN_YELLOW, MAX_YELLOW)
    max_green = min(MAX_GREEN, cycle_length - yellow - MIN_RED)
    green = clamp(parse_number(data.get("green"), 0), MIN_GREEN, max_green)
    red = max(cycle_length - green - yellow, MIN_RED)
    return SignalTiming(green=_tidy(green), yellow=_tidy(yellow), red=_tidy(red))


def normalize_config(raw: Any) -> Configuration:
    """Return a fully valid :class:`Configuration` built from ``raw``.

    ``raw`` may be a :class:`Configuration`, a JSON-shaped mapping with
    camelCase keys, or anything else (treated as empty). Never raises.
    """

    data = _as_mapping(raw)
    # an explicit 0 is a number: it clamps to MIN_CYCLE instead of defaulting
    cycle_length = _tidy(
        clamp(parse_number(data.get("cycleLength"), DEFAULT_CYCLE), MIN_CYCLE, MAX_CYCLE)
    )
    raw_lanes = _as_mapping(data.get("lanes"))
    raw_timing = _as_mapping(data.get("signalTiming"))

    lanes: Dict[str, Tuple[Lane, ...]] = {}
    signal_timing: Dict[str, SignalTiming] = {}
    for direction in DIRECTIONS:
        lanes[direction] = normalize_lanes(raw_lanes.get(direction))
        signal_timing[direction] = normalize_timing(raw_timing.get(direction), cycle_length)

    return Configuration(lanes=lanes, signal_timing=signal_timing, cycle_length=cycle_length)
