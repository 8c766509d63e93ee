"""Memory-driven cognitive modulation of the snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Sequence

from memory import AffectiveMemoryRecord, RetrievedMemory
from snapshot import StateSnapshot

POSITIVE_TOKENS = ("thank", "appreciate", "calm", "glad", "hopeful", "love", "safe")
NEGATIVE_TOKENS = ("stressed", "frustrated", "tired", "worried", "angry", "hate", "scared")

TOP_MEMORIES = 3
SALIENCE_GATE = 0.1


@dataclass(frozen=True)
class CognitiveAppraisal:
    """Aggregated reading of recalled memories and the trigger text."""

    valence: float = 0.0
    salience: float = 0.0
    trauma_impact: float = 0.0
    stress_load: float = 0.0
    recalled: tuple[str, ...] = ()


def concept_valence(text: str | None) -> tuple[float, bool]:
    """Token-based valence of ``text`` and whether any cue word appeared."""
    lowered = (text or "").lower()
    positive = sum(1 for token in POSITIVE_TOKENS if token in lowered)
    negative = sum(1 for token in NEGATIVE_TOKENS if token in lowered)
    if positive + negative == 0:
        return 0.0, False
    return math.tanh((positive - negative) * 0.5), True


def appraise(
    retrieved: Sequence[RetrievedMemory],
    text: str | None,
    *,
    neuroticism: float = 0.4,
) -> CognitiveAppraisal:
    top = list(retrieved[:TOP_MEMORIES])
    total = sum(item.relevance for item in top)
    memory_valence = 0.0
    memory_salience = 0.0
    trauma_impact = 0.0
    if total > 0:
        for item in top:
            weight = item.relevance / total
            memory_valence += item.record.valence * weight
            memory_salience += item.record.salience * weight
            if item.record.trauma:
                trauma_impact += item.record.salience * weight * 1.5

    concept, has_concepts = concept_valence(text)
    valence = memory_valence * 0.6 + concept * 0.4
    salience = memory_salience * 0.7 + (0.3 if has_concepts else 0.0)

    stress_load = trauma_impact * 0.5
    if salience > SALIENCE_GATE and valence < -0.2:
        stress_load += abs(valence) * salience * (1.0 + neuroticism * 0.5)
    return CognitiveAppraisal(
        valence=valence,
        salience=salience,
        trauma_impact=trauma_impact,
        stress_load=min(1.0, stress_load),
        recalled=tuple(item.record.id for item in top),
    )


def apply_appraisal(
    snapshot: StateSnapshot,
    appraisal: CognitiveAppraisal,
    *,
    neuroticism: float = 0.4,
) -> StateSnapshot:
    """Nudge chemistry in the direction of the appraisal."""
    neuro, meta = snapshot.neuro, snapshot.meta
    if appraisal.trauma_impact > 0:
        impact = appraisal.trauma_impact
        neuro = neuro.shift(cortisol=impact * 0.5)
        meta = meta.shift(anxiety=impact * 0.4, vulnerability=impact * 0.2)

    v, s = appraisal.valence, appraisal.salience
    if s > SALIENCE_GATE:
        if v < -0.2:
            neuro = neuro.shift(cortisol=abs(v) * s * (1.0 + neuroticism * 0.5) * 0.25)
            meta = meta.shift(anxiety=abs(v) * s * 0.15)
        elif v > 0.2:
            neuro = neuro.shift(dopamine=v * s * 0.1, serotonin=v * s * 0.1, oxytocin=v * s * 0.05)
    return snapshot.evolve(neuro=neuro, meta=meta)


def memory_pressure(
    recent_negative: Sequence[AffectiveMemoryRecord],
    trauma: Sequence[AffectiveMemoryRecord],
) -> Mapping[str, float]:
    """Resentment and shame inputs for emotion derivation."""
    resentment = 0.0
    if recent_negative:
        resentment = sum(r.salience * abs(r.valence) for r in recent_negative) / len(recent_negative)
    shame = max((r.salience for r in trauma), default=0.0) * 0.5
    return {"resentment": min(1.0, resentment), "shame": min(1.0, shame)}


__all__ = [
    "CognitiveAppraisal",
    "NEGATIVE_TOKENS",
    "POSITIVE_TOKENS",
    "apply_appraisal",
    "appraise",
    "concept_valence",
    "memory_pressure",
]
