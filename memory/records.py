"""Affective memory record definition."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

from utils.serialization import StateRestoreError, coerce_fields

LONG_TERM_EPISODIC = "long_term_episodic"
FLASHBULB = "flashbulb"
PROCEDURAL = "procedural"
IMPLICIT = "implicit"
AUTOBIOGRAPHICAL = "autobiographical"
MEMORY_TYPES = (LONG_TERM_EPISODIC, FLASHBULB, PROCEDURAL, IMPLICIT, AUTOBIOGRAPHICAL)

TRANSIENT = "transient"
CONSOLIDATING = "consolidating"
CONSOLIDATED = "consolidated"
CONSOLIDATION_STAGES = (TRANSIENT, CONSOLIDATING, CONSOLIDATED)


@dataclass(slots=True)
class AffectiveMemoryRecord:
    """One encoded interaction with its emotional signature."""

    id: str
    encoded_at: float
    stimulus_text: str
    response_text: str
    valence: float
    salience: float
    memory_type: str = LONG_TERM_EPISODIC
    consolidation_status: str = TRANSIENT
    stimulus_metadata: dict[str, Any] = field(default_factory=dict)
    neurochemical_snapshot: dict[str, float] = field(default_factory=dict)
    repressed: bool = False
    subconscious: bool = False
    trauma: bool = False
    pleasure: float = 0.0
    arousal: float = 0.0
    dominance: float = 0.0
    age_hours: float = 0.0

    @property
    def pad(self) -> tuple[float, float, float]:
        return (self.pleasure, self.arousal, self.dominance)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "AffectiveMemoryRecord":
        values = coerce_fields(cls, data, context="AffectiveMemoryRecord")
        if values["memory_type"] not in MEMORY_TYPES:
            raise StateRestoreError(f"Unknown memory type '{values['memory_type']}'")
        if values["consolidation_status"] not in CONSOLIDATION_STAGES:
            raise StateRestoreError(f"Unknown consolidation status '{values['consolidation_status']}'")
        for name in ("stimulus_metadata", "neurochemical_snapshot"):
            if not isinstance(values[name], Mapping):
                raise StateRestoreError(f"AffectiveMemoryRecord.{name} must be a mapping")
            values[name] = dict(values[name])
        return cls(**values)


__all__ = [
    "AUTOBIOGRAPHICAL",
    "AffectiveMemoryRecord",
    "CONSOLIDATED",
    "CONSOLIDATING",
    "CONSOLIDATION_STAGES",
    "FLASHBULB",
    "IMPLICIT",
    "LONG_TERM_EPISODIC",
    "MEMORY_TYPES",
    "PROCEDURAL",
    "TRANSIENT",
]
