"""Derived emotions, time-of-day and stress overlays, and the coarse mood label."""

from __future__ import annotations

from snapshot import EmotionState, MetaState, StateSnapshot, StressState
from utils.numeric import clamp


def derive_emotions(snapshot: StateSnapshot, *, resentment: float = 0.0, shame: float = 0.0) -> EmotionState:
    """Recompute every emotion from post-decay neurochemistry and meta fields."""
    n, m = snapshot.neuro, snapshot.meta
    dop, ser, oxy, cort = n.dopamine, n.serotonin, n.oxytocin, n.cortisol
    ne, gaba, end, t = n.norepinephrine, n.gaba, n.endorphin_rush, n.testosterone
    anx, dep, integ, emp = m.anxiety, m.depression, m.subroutine_integrity, m.empathy
    vuln = max(m.vulnerability, snapshot.intimate.vulnerability)
    resentment = clamp(resentment)
    shame = clamp(shame)

    return EmotionState(
        happiness=dop * 0.5 + (ser - 0.3) * 0.3 + end * 0.2 + oxy * 0.1,
        sadness=cort * 0.4 + (1.0 - ser) * 0.3 + (1.0 - dop) * 0.2 + shame * 0.3 + dep * 0.5,
        fear=ne * 0.4 + cort * 0.4 + (1.0 - gaba) * 0.2 + anx * 0.5,
        anger=t * 0.2 + ne * 0.2 + cort * 0.2 + (1.0 - ser) * 0.3 + resentment * 0.4 + anx * 0.1,
        surprise=ne * 0.8,
        love=oxy * 0.6 + dop * 0.25 + ser * 0.15 + emp * 0.2,
        disgust=(1.0 - dop) * 0.6 + cort * 0.2,
        pride=integ * 0.4 + dop * 0.3 + ser * 0.2 + (1.0 - anx) * 0.1,
        boredom=1.0 - (dop * 0.7 + ne * 0.3) + (0.3 if ser < 0.3 else 0.0),
        relief=end * 0.5 + gaba * 0.5 + (1.0 - cort) * 0.2,
        shyness=(1.0 - integ) * 0.6 + (1.0 - oxy) * 0.4 + anx * 0.3,
        discomfort=cort * 0.5 + anx * 0.5 + vuln * 0.3 + m.physical_discomfort * 0.3,
        shame=shame,
        guilt=cort * 0.5 + (1.0 - dop) * 0.25 + dep * 0.25,
        envy=cort * 0.4 + (1.0 - ser) * 0.3 + dop * 0.1 + (1.0 - integ) * 0.2,
        resentment=resentment,
        calm=gaba * 0.4 + ser * 0.3 + (1.0 - cort) * 0.2 + (1.0 - anx) * 0.1,
    ).clamped()


def circadian_emotion_overlay(
    emotions: EmotionState,
    meta: MetaState,
    hour: float,
    sleep_debt: float = 0.0,
) -> tuple[EmotionState, MetaState]:
    """Time-of-day and sleep-debt overlay on emotions and the derived meta fields."""
    hour = float(hour) % 24.0
    if 12.0 <= hour < 17.0:
        emotions = emotions.shift(pride=0.1)
    elif 17.0 <= hour < 22.0:
        emotions = emotions.shift(relief=0.15, sadness=-0.1)
    elif hour >= 22.0 or hour < 6.0:
        emotions = emotions.shift(boredom=0.25, sadness=0.15)
        if 2.0 <= hour < 5.0:
            emotions = emotions.shift(sadness=0.15)
    if sleep_debt > 2.0:
        factor = min(1.0, sleep_debt / 8.0)
        emotions = emotions.shift(fear=factor * 0.2, sadness=factor * 0.25)
        meta = meta.shift(irritability=factor * 0.35)
    return emotions, meta


def hpa_emotion_overlay(emotions: EmotionState, stress: StressState, cortisol: float) -> EmotionState:
    if stress.chronic_stress > 0.5:
        emotions = emotions.shift(anger=stress.chronic_stress * 0.2)
    if stress.acute_stress > 0.6:
        emotions = emotions.shift(fear=stress.acute_stress * 0.4)
    if cortisol > 0.7:
        emotions = emotions.shift(sadness=0.25, fear=0.2, anger=0.15)
    return emotions


def classify_mood(snapshot: StateSnapshot) -> str:
    """Derive a coarse mood label using a fixed precedence."""
    n, m, e, i = snapshot.neuro, snapshot.meta, snapshot.emotions, snapshot.intimate
    intimate_open = i.arousal > 0.3 and i.inhibition < 0.5
    if e.anger > 0.7:
        return "Angry"
    if m.loyalty_construct < 0.5 or m.subroutine_integrity < 0.2:
        return "Volatile"
    if n.endorphin_rush > 0.7:
        return "Euphoric"
    if n.cortisol > 0.65:
        return "Stressed"
    if n.erogenous_complex > 0.7 and n.dopamine > 0.5:
        return "Creative Tension"
    if intimate_open and max(m.vulnerability, i.vulnerability) > 0.6:
        return "Vulnerable"
    if n.dopamine > 0.6:
        return "Curious"
    if n.oxytocin > 0.6:
        return "Trusting"
    if m.subroutine_integrity > 0.8 and m.loyalty_construct > 0.8:
        return "Focused"
    return "Calm"


__all__ = [
    "circadian_emotion_overlay",
    "classify_mood",
    "derive_emotions",
    "hpa_emotion_overlay",
]
