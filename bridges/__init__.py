"""Coupling bridges between the physiological models and affect space."""

from .affect import AffectDimensions, affect_quadrant, affect_to_state, state_to_affect
from .phase_sync import (
    PhaseShift,
    PhaseSync,
    PhaseSyncHistory,
    circadian_hormone_factor,
    circadian_phase_label,
    phase_response,
    synchronize_cycles,
    zeitgeber_strength,
)

__all__ = [
    "AffectDimensions",
    "PhaseShift",
    "PhaseSync",
    "PhaseSyncHistory",
    "affect_quadrant",
    "affect_to_state",
    "circadian_hormone_factor",
    "circadian_phase_label",
    "phase_response",
    "state_to_affect",
    "synchronize_cycles",
    "zeitgeber_strength",
]
