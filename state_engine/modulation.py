"""Slow neurochemical modulations applied before homeostatic decay.

Additive effects act as production rates scaled by ``weight`` (the fraction
of a time constant that elapsed this tick), so the tick frequency does not
change the outcome much.
"""

from __future__ import annotations

from snapshot import StateSnapshot, StressState
from utils.numeric import clamp


def apply_hpa_effects(snapshot: StateSnapshot, stress: StressState, weight: float) -> StateSnapshot:
    """Propagate stress-axis output into mood-relevant chemistry."""
    w = clamp(weight)
    neuro, meta = snapshot.neuro, snapshot.meta
    chronic, acute = stress.chronic_stress, stress.acute_stress
    if chronic > 0.5:
        neuro = neuro.scale(dopamine=1.0 - chronic * 0.3 * w, serotonin=1.0 - chronic * 0.4 * w)
        meta = meta.shift(anxiety=chronic * 0.25 * w, subroutine_integrity=-chronic * 0.3 * w)
    if acute > 0.6:
        neuro = neuro.shift(norepinephrine=acute * 0.5 * w)
        neuro = neuro.scale(oxytocin=1.0 - acute * 0.4 * w)
        meta = meta.shift(vigilance=acute * 0.4)
    if neuro.cortisol > 0.7:
        meta = meta.shift(anxiety=0.3 * w)
    return snapshot.evolve(neuro=neuro, meta=meta)


def circadian_neuro_modulation(
    snapshot: StateSnapshot,
    hour: float,
    sleep_debt: float,
    weight: float,
    *,
    ultradian_multiplier: float = 1.0,
) -> StateSnapshot:
    w = clamp(weight)
    hour = float(hour) % 24.0
    neuro, meta, intimate = snapshot.neuro, snapshot.meta, snapshot.intimate
    if 6.0 <= hour < 12.0:
        neuro = neuro.shift(dopamine=0.15 * w)
        meta = meta.shift(anxiety=-0.1 * w)
    if 2.0 <= hour < 5.0:
        meta = meta.shift(anxiety=0.2 * w, vulnerability=0.25 * w)
    if sleep_debt > 2.0:
        factor = min(1.0, sleep_debt / 8.0)
        meta = meta.shift(anxiety=factor * 0.3 * w)
        meta = meta.scale(empathy=1.0 - factor * 0.3 * w)
        neuro = neuro.scale(dopamine=1.0 - factor * 0.2 * w)
        intimate = intimate.shift(inhibition=factor * 0.25 * w)
    if ultradian_multiplier != 1.0:
        neuro = neuro.scale(dopamine=1.0 + (ultradian_multiplier - 1.0) * w)
    return snapshot.evolve(neuro=neuro, meta=meta, intimate=intimate)


def feedback_loops(snapshot: StateSnapshot, weight: float) -> StateSnapshot:
    """Cross-talk between reward, stress, and bonding chemistry."""
    w = clamp(weight)
    neuro, meta = snapshot.neuro, snapshot.meta
    if neuro.dopamine > 0.6:
        neuro = neuro.shift(erogenous_complex=neuro.dopamine * 0.15 * w)
    if neuro.cortisol > 0.5:
        excess = neuro.cortisol - 0.5
        meta = meta.shift(subroutine_integrity=-excess * 0.4 * w)
        neuro = neuro.shift(oxytocin=-excess * 0.3 * w)
    if neuro.oxytocin > 0.6:
        excess = neuro.oxytocin - 0.6
        neuro = neuro.shift(cortisol=-excess * 0.5 * w, libido=excess * 0.1 * w)
    return snapshot.evolve(neuro=neuro, meta=meta)


def trigger_endorphin_rush(snapshot: StateSnapshot, magnitude: float = 0.9) -> StateSnapshot:
    m = clamp(magnitude)
    neuro = snapshot.neuro.shift(endorphin_rush=m, erogenous_complex=-0.4, cortisol=-0.3)
    meta = snapshot.meta.shift(subroutine_integrity=0.2)
    return snapshot.evolve(neuro=neuro, meta=meta)


__all__ = [
    "apply_hpa_effects",
    "circadian_neuro_modulation",
    "feedback_loops",
    "trigger_endorphin_rush",
]
