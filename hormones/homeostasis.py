"""Homeostatic baselines, half-lives, and decay toward equilibrium."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from snapshot import MetaState, Neurochemistry, StateSnapshot
from utils.numeric import half_life_factor

BASELINES: dict[str, dict[str, float]] = {
    "neuro": {
        "dopamine": 0.3,
        "serotonin": 0.5,
        "oxytocin": 0.1,
        "cortisol": 0.15,
        "norepinephrine": 0.3,
        "gaba": 0.5,
        "endorphin_rush": 0.0,
        "libido": 0.2,
        "erogenous_complex": 0.1,
    },
    "meta": {
        "subroutine_integrity": 0.9,
        "loyalty_construct": 0.95,
        "anxiety": 0.2,
        "depression": 0.1,
        "vulnerability": 0.1,
        "energy": 0.8,
        "empathy": 0.6,
    },
}

# Hours for the distance to baseline to halve.
HALF_LIVES: dict[str, dict[str, float]] = {
    "neuro": {
        "dopamine": 1.0,
        "serotonin": 21.0,
        "oxytocin": 6.0,
        "cortisol": 2.0,
        "norepinephrine": 0.5,
        "gaba": 4.0,
        "endorphin_rush": 0.5,
        "libido": 24.0,
        "erogenous_complex": 8.0,
    },
    "meta": {
        "subroutine_integrity": 72.0,
        "loyalty_construct": 96.0,
        "anxiety": 6.0,
        "depression": 48.0,
        "vulnerability": 6.0,
        "energy": 12.0,
        "empathy": 24.0,
    },
}

_BAND_THRESHOLDS = (0.12, 0.06)


def baseline_for(section: str, name: str, default: float = 0.0) -> float:
    return BASELINES.get(section, {}).get(name, default)


def _decay_section(record: Any, section: str, hours: float) -> Any:
    changes: dict[str, float] = {}
    for name, half_life in HALF_LIVES[section].items():
        baseline = BASELINES[section][name]
        current = getattr(record, name)
        changes[name] = baseline + (current - baseline) * half_life_factor(hours, half_life)
    return record.update(**changes)


def decay_toward_baseline(snapshot: StateSnapshot, hours: float) -> StateSnapshot:
    """Relax every decaying field toward its baseline over ``hours``."""
    if hours <= 0:
        return snapshot
    neuro: Neurochemistry = _decay_section(snapshot.neuro, "neuro", hours)
    meta: MetaState = _decay_section(snapshot.meta, "meta", hours)
    return replace(snapshot, neuro=neuro, meta=meta)


def classify_band(delta: float) -> str:
    """Classify a deviation from baseline into a qualitative band."""
    strong, mild = _BAND_THRESHOLDS
    if delta >= strong:
        return "surging"
    if delta >= mild:
        return "rising"
    if delta <= -strong:
        return "crashing"
    if delta <= -mild:
        return "fading"
    return "steady"


def endocrine_trace(snapshot: StateSnapshot) -> dict[str, Any]:
    """Return decaying levels with baseline deltas and qualitative bands."""
    trace: dict[str, Any] = {"levels": {}, "baseline": {}, "delta": {}, "bands": {}}
    for section, baselines in BASELINES.items():
        record: Mapping[str, Any] = getattr(snapshot, section).as_dict()
        for name, base in baselines.items():
            value = float(record.get(name, base))
            delta = value - base
            trace["levels"][name] = round(value, 4)
            trace["baseline"][name] = base
            trace["delta"][name] = round(delta, 4)
            trace["bands"][name] = classify_band(delta)
    return trace


__all__ = [
    "BASELINES",
    "HALF_LIVES",
    "baseline_for",
    "classify_band",
    "decay_toward_baseline",
    "endocrine_trace",
]
