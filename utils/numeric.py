"""Small numeric helpers shared by the physiological models."""

from __future__ import annotations

import math


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` to ``[low, high]``; NaN collapses to ``low``."""
    if value != value:
        return low
    return max(low, min(high, value))


def clamp_signed(value: float) -> float:
    return clamp(value, -1.0, 1.0)


def lerp(previous: float, target: float, factor: float) -> float:
    return previous + factor * (target - previous)


def exp_weight(hours: float, tau_hours: float) -> float:
    """Fraction of the gap to a target closed after ``hours`` with time constant ``tau_hours``."""
    if hours <= 0 or tau_hours <= 0:
        return 0.0
    return 1.0 - math.exp(-hours / tau_hours)


def half_life_factor(hours: float, half_life_hours: float) -> float:
    """Remaining fraction after ``hours`` of exponential decay."""
    if hours <= 0:
        return 1.0
    if half_life_hours <= 0:
        return 0.0
    return math.exp(-math.log(2.0) * hours / half_life_hours)


__all__ = ["clamp", "clamp_signed", "exp_weight", "half_life_factor", "lerp"]
