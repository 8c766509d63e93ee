"""Deterministic pseudo-variability keyed by a label and the cycle day.

Every "random" choice made by the physiological models comes from here, so a
session can be replayed exactly from its serialized state.
"""

from __future__ import annotations

import math
from typing import Callable

ChaosFunction = Callable[[str, int], float]


def logistic_chaos(label: str, day: int) -> float:
    """Hash-seeded logistic map value in ``[0, 1]``."""
    seed = sum(ord(char) for char in label)
    raw = math.sin(seed * 12.9898 + max(day, 1) * 78.233) * 43758.5453
    x = abs(raw - math.floor(raw))
    x = 3.9 * x * (1.0 - x)
    return max(0.0, min(1.0, x))


class ChaosSource:
    """Samples derived from an injectable deterministic chaos function."""

    def __init__(self, function: ChaosFunction | None = None) -> None:
        self._function = function or logistic_chaos

    def value(self, label: str, day: int) -> float:
        return max(0.0, min(1.0, float(self._function(label, day))))

    def bernoulli(self, label: str, day: int, probability: float) -> bool:
        return self.value(label, day) < probability

    def normal(self, label: str, day: int, mean: float, std: float) -> float:
        """Box-Muller sample built from two labelled chaos draws."""
        u1 = self.value(f"{label}_u1", day)
        u2 = self.value(f"{label}_u2", day)
        if u1 <= 0.0:
            u1 = 0.0001
        if u2 <= 0.0:
            u2 = 0.1234
        z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        return mean + z * std


__all__ = ["ChaosFunction", "ChaosSource", "logistic_chaos"]
