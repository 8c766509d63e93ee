"""Big Five personality collaborator with slow drift toward the biological state."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Protocol

from snapshot import StateSnapshot
from utils.numeric import clamp, lerp
from utils.serialization import StateRestoreError, coerce_fields, coerce_value, require_keys

DEFAULT_SMOOTHING = 0.995


class PersonalityCollaborator(Protocol):
    def get_state(self) -> dict[str, float]: ...

    def update_from_biological_state(self, snapshot: StateSnapshot) -> None: ...


@dataclass(frozen=True)
class BigFiveTraits:
    """Slow-changing trait state; every trait lives in ``[0, 1]``."""

    openness: float = 0.7
    conscientiousness: float = 0.6
    extraversion: float = 0.5
    agreeableness: float = 0.7
    neuroticism: float = 0.4

    def dominant_traits(self, *, threshold: float = 0.65) -> list[str]:
        """Return trait names that stand out above the threshold."""
        scores = asdict(self)
        filtered = [name for name, score in scores.items() if score >= threshold]
        return sorted(filtered, key=lambda name: scores[name], reverse=True)


def traits_from_state(snapshot: StateSnapshot, *, anchor: BigFiveTraits) -> BigFiveTraits:
    """Trait targets implied by the current biological state around ``anchor``."""
    n, m, stress = snapshot.neuro, snapshot.meta, snapshot.stress
    return BigFiveTraits(
        openness=clamp(anchor.openness + (n.dopamine - 0.3) * 0.3 - stress.chronic_stress * 0.1),
        conscientiousness=clamp(anchor.conscientiousness + (m.subroutine_integrity - 0.9) * 0.3),
        extraversion=clamp(anchor.extraversion + (n.dopamine - 0.3) * 0.2 + (n.oxytocin - 0.1) * 0.2 - m.anxiety * 0.1),
        agreeableness=clamp(anchor.agreeableness + (n.oxytocin - 0.1) * 0.3 - m.irritability * 0.2),
        neuroticism=clamp(
            anchor.neuroticism + (m.anxiety - 0.2) * 0.4 + stress.chronic_stress * 0.3 + (n.cortisol - 0.15) * 0.2
        ),
    )


def integrate_traits(
    target: BigFiveTraits,
    *,
    previous: BigFiveTraits | None = None,
    smoothing: float = DEFAULT_SMOOTHING,
) -> BigFiveTraits:
    """Blend a trait target into the previous traits."""
    if not 0.0 <= smoothing <= 1.0:
        raise ValueError("smoothing must be within [0, 1]")
    if previous is None or smoothing == 0.0:
        return target
    factor = 1.0 - smoothing
    return BigFiveTraits(
        **{
            item.name: clamp(lerp(getattr(previous, item.name), getattr(target, item.name), factor))
            for item in fields(BigFiveTraits)
        }
    )


class Personality:
    """Default personality collaborator; drifts once per tick."""

    def __init__(self, traits: BigFiveTraits | None = None, *, smoothing: float = DEFAULT_SMOOTHING) -> None:
        if not 0.0 <= smoothing <= 1.0:
            raise ValueError("smoothing must be within [0, 1]")
        self.anchor = traits or BigFiveTraits()
        self.traits = self.anchor
        self.smoothing = smoothing

    def get_state(self) -> dict[str, float]:
        return {name: round(value, 4) for name, value in asdict(self.traits).items()}

    def update_from_biological_state(self, snapshot: StateSnapshot) -> None:
        target = traits_from_state(snapshot, anchor=self.anchor)
        self.traits = integrate_traits(target, previous=self.traits, smoothing=self.smoothing)

    def serialize(self) -> dict[str, Any]:
        return {"anchor": asdict(self.anchor), "traits": asdict(self.traits), "smoothing": self.smoothing}

    @classmethod
    def deserialize(cls, record: Mapping[str, Any]) -> "Personality":
        data = require_keys(record, ("anchor", "traits", "smoothing"), context="Personality")
        anchor = BigFiveTraits(**coerce_fields(BigFiveTraits, data["anchor"], context="Personality.anchor"))
        smoothing = coerce_value(data["smoothing"], "float", name="smoothing", context="Personality")
        try:
            personality = cls(anchor, smoothing=smoothing)
        except ValueError as exc:
            raise StateRestoreError(str(exc)) from exc
        personality.traits = BigFiveTraits(**coerce_fields(BigFiveTraits, data["traits"], context="Personality.traits"))
        return personality


__all__ = [
    "BigFiveTraits",
    "Personality",
    "PersonalityCollaborator",
    "integrate_traits",
    "traits_from_state",
]
