"""Physiological hormone models: cycle, stress axis, and homeostasis."""

from .chaos import ChaosSource, logistic_chaos
from .cycle import CycleState, Follicle, HormonalCycle
from .homeostasis import BASELINES, HALF_LIVES, classify_band, decay_toward_baseline, endocrine_trace
from .hpa import HPAAxis, HPAState

__all__ = [
    "BASELINES",
    "ChaosSource",
    "CycleState",
    "Follicle",
    "HALF_LIVES",
    "HPAAxis",
    "HPAState",
    "HormonalCycle",
    "classify_band",
    "decay_toward_baseline",
    "endocrine_trace",
    "logistic_chaos",
]
