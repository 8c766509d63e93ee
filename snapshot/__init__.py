"""State snapshot records shared by every subsystem."""

from .records import (
    CYCLE_PHASES,
    MOOD_LABELS,
    RESPONSE_PHASES,
    AffectSync,
    BoundedRecord,
    CycleMetadata,
    EmotionState,
    IntimateState,
    MetaState,
    Neurochemistry,
    StateSnapshot,
    StressState,
)

__all__ = [
    "AffectSync",
    "BoundedRecord",
    "CYCLE_PHASES",
    "CycleMetadata",
    "EmotionState",
    "IntimateState",
    "MOOD_LABELS",
    "MetaState",
    "Neurochemistry",
    "RESPONSE_PHASES",
    "StateSnapshot",
    "StressState",
]
