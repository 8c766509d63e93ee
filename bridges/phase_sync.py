"""Coupling between the hormonal-cycle oscillator and the circadian oscillator."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import numpy as np

from utils.numeric import clamp
from utils.serialization import StateRestoreError, require_keys

HISTORY_HOURS = 168
MIN_HISTORY_FOR_METRICS = 24

_PRC_FIXED = {"feeding": 0.4, "stress": 0.5}


@dataclass(frozen=True)
class PhaseSync:
    hormonal_angle: float
    circadian_angle: float
    phase_difference: float
    zeitgeber_strength: float
    coupling_strength: float
    coherence: float
    disruption: float

    def as_dict(self) -> dict[str, float]:
        return {
            "hormonal_angle": self.hormonal_angle,
            "circadian_angle": self.circadian_angle,
            "phase_difference": self.phase_difference,
            "zeitgeber_strength": self.zeitgeber_strength,
            "coupling_strength": self.coupling_strength,
            "coherence": self.coherence,
            "disruption": self.disruption,
        }


@dataclass(frozen=True)
class PhaseShift:
    direction: str
    magnitude: float
    confidence: float


def wrap_angle(angle: float) -> float:
    """Wrap an angle into ``[-pi, pi]``."""
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    return clamp(wrapped, -math.pi, math.pi)


def zeitgeber_strength(hour: float) -> float:
    """Time-of-day entrainment strength (morning light, evening darkness, meals)."""
    hour = float(hour) % 24.0
    if 6.0 <= hour <= 10.0:
        return 0.9
    if hour >= 21.0 or hour <= 2.0:
        return 0.7
    if 12.0 <= hour <= 13.0 or 19.0 <= hour <= 20.0:
        return 0.5
    return 0.3


def synchronize_cycles(cycle_day: int, hour: float, cycle_length: int = 28) -> PhaseSync:
    """Kuramoto-style coherence between the cycle angle and the circadian angle."""
    length = max(1, int(cycle_length))
    hormonal = (cycle_day / length) * 2.0 * math.pi
    circadian = ((float(hour) % 24.0) / 24.0) * 2.0 * math.pi
    difference = wrap_angle(hormonal - circadian)
    zeitgeber = zeitgeber_strength(hour)
    coupling = 0.3 + zeitgeber * 0.4
    coherence = clamp(math.cos(difference / 2.0) * coupling / 0.5)
    disruption = clamp((1.0 - coherence) * 0.7 + abs(difference) / math.pi * 0.3)
    return PhaseSync(
        hormonal_angle=hormonal,
        circadian_angle=circadian,
        phase_difference=difference,
        zeitgeber_strength=zeitgeber,
        coupling_strength=coupling,
        coherence=coherence,
        disruption=disruption,
    )


def _prc_sensitivity(stimulus_type: str, hour: float) -> float:
    if stimulus_type == "light":
        if hour >= 21.0 or hour <= 3.0:
            return 0.9
        if 5.0 <= hour <= 9.0:
            return 1.0
        return 0.3
    if stimulus_type == "social":
        return 0.5 if 7.0 <= hour <= 23.0 else 0.2
    if stimulus_type == "physical":
        return 0.6 if 7.0 <= hour <= 18.0 else 0.3
    return _PRC_FIXED.get(stimulus_type, 0.3)


def phase_response(stimulus_type: str, intensity: float, duration_minutes: float, hour: float) -> PhaseShift:
    """Phase shift produced by a zeitgeber stimulus; delays are negative."""
    hour = float(hour) % 24.0
    intensity = clamp(intensity)
    sensitivity = _prc_sensitivity(stimulus_type, hour)
    magnitude = intensity * sensitivity * max(0.0, duration_minutes) / 60.0 * 2.0
    confidence = min(intensity * sensitivity, 1.0)
    if hour >= 18.0 or hour < 3.0:
        return PhaseShift("delay", -magnitude, confidence)
    if 3.0 <= hour < 10.0:
        return PhaseShift("advance", magnitude, confidence)
    return PhaseShift("minimal", magnitude * 0.2, confidence)


def circadian_hormone_factor(hormone: str, hour: float) -> float:
    """Multiplicative time-of-day factor for a hormone."""
    t = float(hour) % 24.0
    if hormone == "cortisol":
        return 0.5 + 0.5 * math.cos((t - 8.0) / 24.0 * 2.0 * math.pi)
    if hormone == "testosterone":
        if 6.0 <= t < 10.0:
            return 1.2
        if 10.0 <= t < 18.0:
            return 1.0 - (t - 10.0) * 0.05
        return 0.6
    if hormone == "melatonin":
        night = t + 24.0 if t < 6.0 else t
        if night >= 21.0:
            return 0.3 + math.sin((night - 21.0) / 9.0 * math.pi) * 0.7
        return 0.1
    if hormone == "estradiol":
        return 0.9 + 0.1 * math.cos(t / 24.0 * 2.0 * math.pi)
    return 1.0


def circadian_phase_label(hour: float) -> str:
    t = float(hour) % 24.0
    if 5.0 <= t < 8.0:
        return "early_morning"
    if 8.0 <= t < 12.0:
        return "morning"
    if 12.0 <= t < 17.0:
        return "afternoon"
    if 17.0 <= t < 21.0:
        return "evening"
    if t >= 21.0 or t < 2.0:
        return "night"
    return "deep_night"


class PhaseSyncHistory:
    """Rolling week of coherence samples used for chronodisruption metrics."""

    def __init__(self, max_entries: int = HISTORY_HOURS, entries: Iterable[Mapping[str, float]] = ()) -> None:
        self.max_entries = max_entries
        self._entries: deque[dict[str, float]] = deque(maxlen=max_entries)
        for entry in entries:
            self._entries.append(
                {
                    "clock_hours": float(entry["clock_hours"]),
                    "coherence": float(entry["coherence"]),
                    "disruption": float(entry["disruption"]),
                }
            )

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def last_clock_hours(self) -> float | None:
        return self._entries[-1]["clock_hours"] if self._entries else None

    def due(self, clock_hours: float) -> bool:
        """True once per simulated hour."""
        last = self.last_clock_hours
        return last is None or math.floor(clock_hours) > math.floor(last)

    def record(self, sync: PhaseSync, clock_hours: float) -> None:
        self._entries.append(
            {"clock_hours": float(clock_hours), "coherence": sync.coherence, "disruption": sync.disruption}
        )

    def social_jet_lag(self) -> float:
        """Weekday/weekend coherence gap expressed in hours; needs a full week."""
        if len(self._entries) < HISTORY_HOURS:
            return 0.0
        weekday: list[float] = []
        weekend: list[float] = []
        for entry in self._entries:
            day_index = int(entry["clock_hours"] // 24.0) % 7
            (weekend if day_index >= 5 else weekday).append(entry["coherence"])
        if not weekday or not weekend:
            return 0.0
        return abs(float(np.mean(weekday)) - float(np.mean(weekend))) * 12.0

    def chronodisruption(self) -> dict[str, Any]:
        if len(self._entries) < MIN_HISTORY_FOR_METRICS:
            return {
                "score": 0.0,
                "severity": "insufficient_data",
                "average_coherence": None,
                "coherence_std": None,
                "social_jet_lag_hours": 0.0,
                "recommendations": [],
            }
        coherence = np.array([entry["coherence"] for entry in self._entries], dtype=float)
        average = float(coherence.mean())
        spread = float(coherence.std())
        jet_lag = self.social_jet_lag()
        score = clamp((1.0 - average) * 0.5 + spread * 0.3 + min(jet_lag / 4.0, 1.0) * 0.2)
        if score < 0.2:
            severity = "minimal"
        elif score < 0.4:
            severity = "mild"
        elif score < 0.6:
            severity = "moderate"
        else:
            severity = "severe"
        recommendations: list[str] = []
        if average < 0.6:
            recommendations.append("Anchor bright light exposure to the early morning.")
        if spread > 0.2:
            recommendations.append("Keep sleep and meal times consistent across days.")
        if jet_lag > 1.0:
            recommendations.append("Reduce the schedule shift between weekdays and weekends.")
        return {
            "score": score,
            "severity": severity,
            "average_coherence": average,
            "coherence_std": spread,
            "social_jet_lag_hours": jet_lag,
            "recommendations": recommendations,
        }

    def serialize(self) -> dict[str, Any]:
        return {"max_entries": self.max_entries, "entries": [dict(entry) for entry in self._entries]}

    @classmethod
    def deserialize(cls, record: Mapping[str, Any]) -> "PhaseSyncHistory":
        data = require_keys(record, ("max_entries", "entries"), context="PhaseSyncHistory")
        try:
            return cls(max_entries=int(data["max_entries"]), entries=data["entries"])
        except (KeyError, TypeError, ValueError) as exc:
            raise StateRestoreError(f"PhaseSyncHistory entries are malformed: {exc}") from exc


__all__ = [
    "PhaseShift",
    "PhaseSync",
    "PhaseSyncHistory",
    "circadian_hormone_factor",
    "circadian_phase_label",
    "phase_response",
    "synchronize_cycles",
    "wrap_angle",
    "zeitgeber_strength",
]
