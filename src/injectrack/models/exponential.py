# src/injectrack/models/exponential.py
import math
from datetime import datetime

import numpy as np


def _is_valid(dose_mg, half_life_minutes) -> bool:
    if dose_mg is None or half_life_minutes is None:
        return False
    return (math.isfinite(dose_mg) and dose_mg > 0
            and math.isfinite(half_life_minutes) and half_life_minutes > 0)


def residual_level(dose_mg: float, half_life_minutes: float | None,
                   injected_at: datetime, at: datetime) -> float:
    """
    Amount of a single dose still present at `at` under first-order decay.

      level = D * 0.5 ** (elapsed / t½)

    Elapsed time and half-life are both in minutes. Before the injection the
    dose contributes nothing; a missing or non-positive half-life (or dose)
    contributes nothing at any time.
    """
    if not _is_valid(dose_mg, half_life_minutes):
        return 0.0
    elapsed_min = (at - injected_at).total_seconds() / 60.0
    if elapsed_min < 0:
        return 0.0
    return float(dose_mg) * 0.5 ** (elapsed_min / float(half_life_minutes))


def decay_curve(dose_mg: float, half_life_minutes: float | None,
                elapsed_minutes: np.ndarray) -> np.ndarray:
    """
    Vectorised residual_level over an array of elapsed times (minutes).

    Negative elapsed entries (samples before the injection) are 0.
    """
    elapsed = np.asarray(elapsed_minutes, dtype=float)
    if not _is_valid(dose_mg, half_life_minutes):
        return np.zeros_like(elapsed)
    # clip first so pre-dose samples don't overflow 0.5 ** (large negative)
    levels = float(dose_mg) * np.power(0.5, np.maximum(elapsed, 0.0) / float(half_life_minutes))
    return np.where(elapsed >= 0, levels, 0.0)
