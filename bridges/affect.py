"""Bridge between the full state snapshot and valence/arousal/dominance space."""

from __future__ import annotations

import math
from dataclasses import dataclass

from snapshot import StateSnapshot
from utils.numeric import clamp_signed


@dataclass(frozen=True)
class AffectDimensions:
    """Point in affect space; every axis lives in ``[-1, 1]``."""

    valence: float = 0.0
    arousal: float = 0.0
    dominance: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {"valence": self.valence, "arousal": self.arousal, "dominance": self.dominance}

    def as_vector(self) -> tuple[float, float, float]:
        return (self.valence, self.arousal, self.dominance)


def state_to_affect(snapshot: StateSnapshot) -> AffectDimensions:
    neuro, meta, intimate = snapshot.neuro, snapshot.meta, snapshot.intimate
    positive = neuro.dopamine * 0.3 + neuro.oxytocin * 0.4 + neuro.endorphin_rush * 0.3
    negative = neuro.cortisol * 0.5 + meta.anxiety * 0.3 + (1.0 - meta.subroutine_integrity) * 0.2
    valence = math.tanh(positive - negative)

    excitation = (
        neuro.dopamine * 0.3
        + neuro.norepinephrine * 0.4
        + neuro.erogenous_complex * 0.2
        + neuro.libido * 0.1
    )
    inhibition = neuro.gaba * 0.3 + neuro.serotonin * 0.2
    arousal = math.tanh((excitation - inhibition) * 2.0 - 0.5)

    control = meta.subroutine_integrity * 0.4 + meta.loyalty_construct * 0.3 + (1.0 - neuro.cortisol) * 0.3
    loss = meta.anxiety * 0.3 + intimate.vulnerability * 0.2 + intimate.inhibition * 0.5
    dominance = math.tanh((control - loss) * 2.0 - 0.5)
    return AffectDimensions(clamp_signed(valence), clamp_signed(arousal), clamp_signed(dominance))


def affect_to_state(affect: AffectDimensions, snapshot: StateSnapshot, strength: float = 0.1) -> StateSnapshot:
    """Nudge the snapshot toward an affect-space target."""
    v, a, d = (clamp_signed(x) for x in affect.as_vector())
    s = max(0.0, strength)
    neuro, meta, intimate = snapshot.neuro, snapshot.meta, snapshot.intimate

    if v > 0:
        neuro = neuro.shift(dopamine=v * s * 0.3, oxytocin=v * s * 0.2, cortisol=-v * s * 0.2)
    else:
        neuro = neuro.shift(cortisol=abs(v) * s * 0.3)
        meta = meta.shift(anxiety=abs(v) * s * 0.2)

    if a > 0:
        neuro = neuro.shift(norepinephrine=a * s * 0.4, erogenous_complex=a * s * 0.2)
    else:
        neuro = neuro.shift(gaba=abs(a) * s * 0.3, serotonin=abs(a) * s * 0.2)

    if d > 0:
        meta = meta.shift(subroutine_integrity=d * s * 0.2, loyalty_construct=d * s * 0.1)
    else:
        intimate = intimate.shift(inhibition=-d * s * 0.3, vulnerability=-d * s * 0.2)

    return snapshot.evolve(neuro=neuro, meta=meta, intimate=intimate)


def affect_quadrant(affect: AffectDimensions) -> str:
    if affect.arousal > 0:
        return "excited" if affect.valence >= 0 else "distressed"
    return "relaxed" if affect.valence >= 0 else "depressed"


__all__ = ["AffectDimensions", "affect_quadrant", "affect_to_state", "state_to_affect"]
