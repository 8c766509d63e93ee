"""State engine package exports."""

from .clock import CHRONOTYPES, CircadianClock
from .engine import StateEngine
from .personality import BigFiveTraits, Personality, PersonalityCollaborator, integrate_traits
from .pipeline import StimulusOutcome, Subsystems, TickOutcome, Trigger, Zeitgeber, run_stimulus, run_tick

__all__ = [
    "BigFiveTraits",
    "CHRONOTYPES",
    "CircadianClock",
    "Personality",
    "PersonalityCollaborator",
    "StateEngine",
    "StimulusOutcome",
    "Subsystems",
    "TickOutcome",
    "Trigger",
    "Zeitgeber",
    "integrate_traits",
    "run_stimulus",
    "run_tick",
]
