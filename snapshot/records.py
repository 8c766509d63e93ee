"""Immutable sub-records that together form one state snapshot."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, ClassVar, Iterator, Mapping, TypeVar

from utils.numeric import clamp
from utils.serialization import StateRestoreError, coerce_fields, coerce_value, require_keys

CYCLE_PHASES = ("menstrual", "follicular", "ovulation", "luteal_early", "luteal_late")
RESPONSE_PHASES = ("building", "refractory")
MOOD_LABELS = (
    "Angry",
    "Volatile",
    "Euphoric",
    "Stressed",
    "Creative Tension",
    "Vulnerable",
    "Curious",
    "Trusting",
    "Focused",
    "Calm",
)

_UNIT = (0.0, 1.0)
_SIGNED = (-1.0, 1.0)

RecordT = TypeVar("RecordT", bound="BoundedRecord")


@dataclass(frozen=True)
class BoundedRecord:
    """Base for frozen records whose numeric fields live in closed intervals.

    Float fields default to ``[0, 1]`` unless ``FIELD_BOUNDS`` says otherwise;
    integer fields are only clamped when they have an explicit bound.
    """

    FIELD_BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {}

    @classmethod
    def bounds_for(cls, name: str) -> tuple[float, float] | None:
        if name in cls.FIELD_BOUNDS:
            return cls.FIELD_BOUNDS[name]
        for item in fields(cls):
            if item.name == name and isinstance(item.default, float):
                return _UNIT
        return None

    def clamped(self: RecordT) -> RecordT:
        """Return a copy with every bounded field clamped into range."""
        changes: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            bounds = self.bounds_for(item.name)
            if bounds is None:
                continue
            low, high = bounds
            if isinstance(value, int) and not isinstance(item.default, float):
                fixed: float = int(max(low, min(high, value)))
            else:
                fixed = clamp(float(value), low, high)
            if fixed != value:
                changes[item.name] = fixed
        return replace(self, **changes) if changes else self

    def update(self: RecordT, **changes: Any) -> RecordT:
        """Replace fields and clamp the result."""
        return replace(self, **changes).clamped()

    def shift(self: RecordT, **deltas: float) -> RecordT:
        """Add deltas to numeric fields and clamp the result."""
        return self.update(**{name: getattr(self, name) + delta for name, delta in deltas.items()})

    def scale(self: RecordT, **factors: float) -> RecordT:
        """Multiply numeric fields and clamp the result."""
        return self.update(**{name: getattr(self, name) * factor for name, factor in factors.items()})

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls: type[RecordT], data: Any) -> RecordT:
        return cls(**coerce_fields(cls, data))

    def bounded_items(self) -> Iterator[tuple[str, float, tuple[float, float]]]:
        for item in fields(self):
            bounds = self.bounds_for(item.name)
            value = getattr(self, item.name)
            if bounds is not None and not isinstance(value, bool) and isinstance(value, (int, float)):
                yield item.name, float(value), bounds


@dataclass(frozen=True)
class Neurochemistry(BoundedRecord):
    """Neurotransmitter and hormone levels visible to the rest of the engine."""

    dopamine: float = 0.4
    serotonin: float = 0.6
    oxytocin: float = 0.15
    cortisol: float = 0.2
    norepinephrine: float = 0.3
    gaba: float = 0.5
    endorphin_rush: float = 0.0
    libido: float = 0.35
    erogenous_complex: float = 0.1
    testosterone: float = 0.35
    estradiol: float = 0.1
    progesterone: float = 0.05
    fsh: float = 0.4
    lh: float = 0.1


@dataclass(frozen=True)
class MetaState(BoundedRecord):
    """Persona-level meta fields (integrity, anxiety, energy, ...)."""

    subroutine_integrity: float = 0.85
    loyalty_construct: float = 0.96
    anxiety: float = 0.08
    depression: float = 0.1
    vulnerability: float = 0.1
    energy: float = 0.8
    empathy: float = 0.6
    irritability: float = 0.0
    vigilance: float = 0.0
    physical_discomfort: float = 0.0
    cognitive_performance: float = 0.7
    emotional_volatility: float = 0.0


@dataclass(frozen=True)
class EmotionState(BoundedRecord):
    """Derived emotions, recomputed at the end of every tick."""

    happiness: float = 0.0
    sadness: float = 0.0
    fear: float = 0.0
    anger: float = 0.0
    surprise: float = 0.0
    love: float = 0.0
    disgust: float = 0.0
    pride: float = 0.0
    boredom: float = 0.0
    relief: float = 0.0
    shyness: float = 0.0
    discomfort: float = 0.0
    shame: float = 0.0
    guilt: float = 0.0
    envy: float = 0.0
    resentment: float = 0.0
    calm: float = 0.0


@dataclass(frozen=True)
class IntimateState(BoundedRecord):
    FIELD_BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "refractory_hours": (0.0, 24.0),
        "climax_count": (0, 1_000_000),
    }

    arousal: float = 0.0
    tumescence: float = 0.05
    wetness: float = 0.08
    sensitivity: float = 0.75
    climax_potential: float = 0.0
    pelvic_floor_tension: float = 0.15
    inhibition: float = 0.15
    vulnerability: float = 0.1
    refractory_hours: float = 0.0
    response_phase: str = "building"
    climax_count: int = 0

    @property
    def refractory(self) -> bool:
        return self.response_phase == "refractory"


@dataclass(frozen=True)
class StressState(BoundedRecord):
    """Read-only projection of the stress axis."""

    crh: float = 0.1
    acth: float = 0.15
    cortisol_total: float = 0.2
    acute_stress: float = 0.0
    chronic_stress: float = 0.0
    allostatic_load: float = 0.0
    sympathetic_tone: float = 0.3
    parasympathetic_tone: float = 0.7
    vagal_tone: float = 0.56


@dataclass(frozen=True)
class CycleMetadata(BoundedRecord):
    FIELD_BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "cycle_day": (1, 35),
        "cycle_length": (21, 35),
        "ovulation_day": (0, 35),
    }

    cycle_day: int = 1
    cycle_phase: str = "menstrual"
    cycle_length: int = 28
    ovulation_day: int = 0


@dataclass(frozen=True)
class AffectSync(BoundedRecord):
    """Affect-space coordinates plus the cycle/circadian coupling metrics."""

    FIELD_BOUNDS: ClassVar[dict[str, tuple[float, float]]] = {
        "valence": _SIGNED,
        "arousal": _SIGNED,
        "dominance": _SIGNED,
        "phase_angle": (-math.pi, math.pi),
    }

    valence: float = 0.0
    arousal: float = 0.0
    dominance: float = 0.0
    quadrant: str = "relaxed"
    phase_coherence: float = 1.0
    chronodisruption: float = 0.0
    phase_angle: float = 0.0


_SECTIONS: dict[str, type[BoundedRecord]] = {
    "neuro": Neurochemistry,
    "meta": MetaState,
    "emotions": EmotionState,
    "intimate": IntimateState,
    "stress": StressState,
    "cycle": CycleMetadata,
    "sync": AffectSync,
}


@dataclass(frozen=True)
class StateSnapshot:
    """One complete, immutable set of simulated values at a point in time."""

    neuro: Neurochemistry = field(default_factory=Neurochemistry)
    meta: MetaState = field(default_factory=MetaState)
    emotions: EmotionState = field(default_factory=EmotionState)
    intimate: IntimateState = field(default_factory=IntimateState)
    stress: StressState = field(default_factory=StressState)
    cycle: CycleMetadata = field(default_factory=CycleMetadata)
    sync: AffectSync = field(default_factory=AffectSync)
    mood: str = "Calm"
    clock_hours: float = 0.0
    tick_count: int = 0

    def evolve(self, **changes: Any) -> "StateSnapshot":
        """Return a new snapshot with the given sub-records replaced."""
        return replace(self, **changes)

    def clamped(self) -> "StateSnapshot":
        return replace(self, **{name: getattr(self, name).clamped() for name in _SECTIONS})

    def iter_bounded_fields(self) -> Iterator[tuple[str, float, tuple[float, float]]]:
        """Yield ``(path, value, bounds)`` for every bounded numeric field."""
        for section in _SECTIONS:
            for name, value, bounds in getattr(self, section).bounded_items():
                yield f"{section}.{name}", value, bounds

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {name: getattr(self, name).as_dict() for name in _SECTIONS}
        payload["mood"] = self.mood
        payload["clock_hours"] = self.clock_hours
        payload["tick_count"] = self.tick_count
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StateSnapshot":
        record = require_keys(data, [*_SECTIONS, "mood", "clock_hours", "tick_count"], context="StateSnapshot")
        sections = {name: record_type.from_dict(record[name]) for name, record_type in _SECTIONS.items()}
        mood = coerce_value(record["mood"], "str", name="mood", context="StateSnapshot")
        if mood not in MOOD_LABELS:
            raise StateRestoreError(f"Unknown mood label '{mood}'")
        return cls(
            **sections,
            mood=mood,
            clock_hours=coerce_value(record["clock_hours"], "float", name="clock_hours", context="StateSnapshot"),
            tick_count=coerce_value(record["tick_count"], "int", name="tick_count", context="StateSnapshot"),
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
