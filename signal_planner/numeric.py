"""Small numeric helpers shared by the simulation and optimisation stages."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals with ties going towards +inf.

    ``digits == 0`` yields an ``int`` so whole-number metrics serialise as
    integers.
    """

    if digits == 0:
        return int(math.floor(value + 0.5))
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean (0 for empty or zero-mean input)."""

    if not len(values):
        return 0.0
    data = np.asarray(values, dtype=float)
    mean = float(data.mean())
    if mean == 0:
        return 0.0
    return float(data.std()) / mean
