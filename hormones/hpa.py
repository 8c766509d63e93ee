"""Stress axis model: CRH -> ACTH -> cortisol with explicit propagation lags.

Inputs are clamped on read; nothing here raises for implausible values.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from snapshot import StressState
from utils.numeric import clamp, exp_weight, half_life_factor
from utils.serialization import coerce_fields

logger = logging.getLogger("somatic.hpa")

CRH_BASE = 0.1
ACTH_BASE = 0.15
CORTISOL_FREE_BASE = 0.02
CORTISOL_BOUND_BASE = 0.18
CORTISOL_BASE = CORTISOL_FREE_BASE + CORTISOL_BOUND_BASE

# Half-lives in hours.
CRH_HALF_LIFE = 0.1
ACTH_HALF_LIFE = 0.3
CORTISOL_HALF_LIFE = 1.5
NOREPINEPHRINE_HALF_LIFE = 0.083
CHRONIC_STRESS_HALF_LIFE = 120.0

# Lag time constants in minutes.
RELEASING_LAG_MINUTES = 1.5
PITUITARY_LAG_MINUTES = 7.0
RELEASING_FRACTION = 0.9
PITUITARY_FRACTION = 0.7

CHRONIC_DYSREGULATION_HOURS = 672.0
FEEDBACK_TAU_HOURS = 0.25

_STRESS_TYPE_MULTIPLIERS = {"psychological": 1.15, "social": 1.15}


@dataclass(slots=True)
class HPAState:
    crh: float = CRH_BASE
    acth: float = ACTH_BASE
    cortisol_free: float = CORTISOL_FREE_BASE
    cortisol_bound: float = CORTISOL_BOUND_BASE
    gr_occupancy: float = 0.15
    mr_occupancy: float = 0.5
    gr_sensitivity: float = 1.0
    sympathetic_tone: float = 0.3
    parasympathetic_tone: float = 0.7
    vagal_tone: float = 0.56
    norepinephrine: float = 0.15
    immune_suppression: float = 0.16
    immune_function: float = 0.902
    inflammation_marker: float = 0.0696
    glucose_mobilization: float = 0.2
    lipolysis: float = 0.1
    protein_catabolism: float = 0.05
    thyroid_suppression: float = 0.0
    acute_stress: float = 0.0
    chronic_stress: float = 0.0
    allostatic_load: float = 0.0
    recovery_capacity: float = 0.95
    sensitization: float = 0.0
    habituation: float = 0.0
    morning_cortisol: float = 0.4
    evening_cortisol: float = 0.1
    cortisol_awakening_response: float = 0.15
    circadian_phase: float = 8.0
    circadian_drive: float = 0.4
    sexual_hpa_suppression: float = 0.0
    reactivity: float = 1.0
    hours_since_acute_stressor: float = 24.0
    chronic_stress_hours: float = 0.0
    releasing_to_pituitary_lag: float = 0.0
    pituitary_to_terminal_lag: float = 0.0
    dexamethasone_suppression_level: float = 0.0
    acth_stimulation_response: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "HPAState":
        return cls(**coerce_fields(cls, data))


class HPAAxis:
    """Cascading stress-hormone axis with circadian and chronic-load effects."""

    def __init__(self, state: HPAState | None = None) -> None:
        self._state = state or HPAState()

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------
    @property
    def state(self) -> HPAState:
        return HPAState(**self._state.as_dict())

    def total_cortisol(self) -> float:
        return clamp(self._state.cortisol_free + self._state.cortisol_bound)

    @property
    def dysregulation(self) -> float:
        return min(1.0, self._state.chronic_stress_hours / CHRONIC_DYSREGULATION_HOURS)

    def projection(self) -> StressState:
        s = self._state
        return StressState(
            crh=s.crh,
            acth=s.acth,
            cortisol_total=self.total_cortisol(),
            acute_stress=s.acute_stress,
            chronic_stress=s.chronic_stress,
            allostatic_load=s.allostatic_load,
            sympathetic_tone=s.sympathetic_tone,
            parasympathetic_tone=s.parasympathetic_tone,
            vagal_tone=s.vagal_tone,
        ).clamped()

    def get_state(self) -> dict[str, Any]:
        payload = self.projection().as_dict()
        payload.update(
            {
                "cortisol_free": self._state.cortisol_free,
                "norepinephrine": self._state.norepinephrine,
                "immune_function": self._state.immune_function,
                "inflammation_marker": self._state.inflammation_marker,
                "recovery_capacity": self._state.recovery_capacity,
                "sensitization": self._state.sensitization,
                "morning_cortisol": self._state.morning_cortisol,
                "evening_cortisol": self._state.evening_cortisol,
                "circadian_drive": self._state.circadian_drive,
                "reactivity": self._state.reactivity,
            }
        )
        return payload

    # ------------------------------------------------------------------
    # Stressors
    # ------------------------------------------------------------------
    def apply_acute_stress(
        self,
        magnitude: float,
        context: Mapping[str, float] | None = None,
        stress_type: str | None = None,
    ) -> None:
        """Record a stressor; downstream release happens through the lag reservoirs."""
        m = clamp(magnitude)
        if m <= 0.0:
            return
        s = self._state
        type_multiplier = _STRESS_TYPE_MULTIPLIERS.get(stress_type or "", 1.0)
        amygdala = 1.0
        if context:
            amygdala += max(clamp(context.get("fear", 0.0)), clamp(context.get("anger", 0.0))) * 0.3
        surge = m * s.reactivity * type_multiplier * amygdala * (1.0 + s.sensitization * 0.5)

        s.acute_stress = max(s.acute_stress, m)
        s.crh = clamp(max(s.crh, CRH_BASE + surge))
        s.releasing_to_pituitary_lag += surge * RELEASING_FRACTION
        s.sympathetic_tone = clamp(s.sympathetic_tone + 0.5 * m)
        s.parasympathetic_tone = clamp(s.parasympathetic_tone - 0.3 * m)
        s.norepinephrine = clamp(s.norepinephrine + 0.7 * m)
        if s.hours_since_acute_stressor < 1.0:
            s.sensitization = clamp(s.sensitization + 0.05 * type_multiplier)
        s.hours_since_acute_stressor = 0.0
        logger.debug("Acute stressor %.2f (%s) queued surge %.3f", m, stress_type or "generic", surge)

    def apply_chronic_stress(self, magnitude: float, duration_hours: float) -> None:
        """Accumulate allostatic load and flatten the circadian profile."""
        m = clamp(magnitude)
        if m <= 0.0 or duration_hours <= 0:
            return
        s = self._state
        s.chronic_stress = max(s.chronic_stress, m)
        s.chronic_stress_hours += float(duration_hours)
        dys = self.dysregulation
        s.allostatic_load = clamp(s.allostatic_load + dys * 0.01)
        s.crh = clamp(s.crh + m * 0.4 * 0.1)
        s.acth = clamp(s.acth + m * 0.4 * 0.15)
        s.cortisol_free = clamp(s.cortisol_free + m * 0.4 * 0.2)
        s.gr_sensitivity = clamp(1.0 - dys * 0.15)
        s.recovery_capacity = clamp(0.95 * (1.0 - dys * 0.6))
        s.sympathetic_tone = clamp(s.sympathetic_tone + m * 0.2)
        s.parasympathetic_tone = max(0.2, s.parasympathetic_tone - m * 0.3)
        self._update_circadian_markers(sleep_debt=0.0)

    def apply_trauma_effects(self, intensity: float, days_since: float, dissociative: bool = False) -> None:
        i = clamp(intensity)
        s = self._state
        if days_since < 7:
            s.crh = clamp(s.crh + i * 0.5)
        elif days_since > 30:
            if dissociative:
                s.cortisol_free = clamp(s.cortisol_free * (1.0 - i * 0.2))
                s.sensitization = clamp(s.sensitization + i * 0.6)
            else:
                s.crh = clamp(s.crh + i * 0.3)

    # ------------------------------------------------------------------
    # Time evolution
    # ------------------------------------------------------------------
    def process_lags(self, dt_seconds: float) -> None:
        """Release the pending reservoirs through the two-stage lag chain.

        Uses the closed-form solution of the chained first-order stages so
        the released amounts do not depend on how time is sliced.
        """
        if dt_seconds <= 0:
            return
        s = self._state
        t = dt_seconds / 60.0
        tau1, tau2 = RELEASING_LAG_MINUTES, PITUITARY_LAG_MINUTES
        first = s.releasing_to_pituitary_lag
        second = s.pituitary_to_terminal_lag
        decay1 = math.exp(-t / tau1)
        decay2 = math.exp(-t / tau2)

        released_first = first * (1.0 - decay1)
        forwarded = PITUITARY_FRACTION * released_first
        second_after = second * decay2 + (
            PITUITARY_FRACTION * first / tau1 * (decay1 - decay2) / (1.0 / tau2 - 1.0 / tau1)
        )
        second_after = max(0.0, second_after)
        delivered = max(0.0, second + forwarded - second_after)

        s.releasing_to_pituitary_lag = first * decay1
        s.pituitary_to_terminal_lag = second_after
        s.acth = clamp(s.acth + released_first)
        s.cortisol_free = clamp(s.cortisol_free + delivered)

    def advance_recovery(self, dt_seconds: float) -> None:
        """Decay toward baseline, then re-apply negative feedback and autonomic balance."""
        if dt_seconds <= 0:
            return
        s = self._state
        hours = dt_seconds / 3600.0
        s.crh = CRH_BASE + (s.crh - CRH_BASE) * half_life_factor(hours, CRH_HALF_LIFE)
        s.acth = ACTH_BASE + (s.acth - ACTH_BASE) * half_life_factor(hours, ACTH_HALF_LIFE)
        cortisol_factor = half_life_factor(hours, CORTISOL_HALF_LIFE)
        s.cortisol_free = CORTISOL_FREE_BASE + (s.cortisol_free - CORTISOL_FREE_BASE) * cortisol_factor
        s.cortisol_bound = CORTISOL_BOUND_BASE + (s.cortisol_bound - CORTISOL_BOUND_BASE) * cortisol_factor
        s.norepinephrine = 0.15 + (s.norepinephrine - 0.15) * half_life_factor(hours, NOREPINEPHRINE_HALF_LIFE)

        s.acute_stress *= math.exp(-hours / 0.5)
        s.chronic_stress *= half_life_factor(hours, CHRONIC_STRESS_HALF_LIFE)
        s.hours_since_acute_stressor += hours
        if s.acute_stress < 0.2 and s.chronic_stress < 0.3:
            s.recovery_capacity += (0.95 - s.recovery_capacity) * exp_weight(hours, 1000.0)
        if s.hours_since_acute_stressor > 1.0:
            s.sensitization *= math.exp(-hours / 24.0)
        s.habituation *= math.exp(-hours / 72.0)

        self._apply_negative_feedback(hours)
        self._rebalance_autonomic(hours)

    def _apply_negative_feedback(self, hours: float) -> None:
        s = self._state
        weight = exp_weight(hours, FEEDBACK_TAU_HOURS)
        total = s.cortisol_free + s.cortisol_bound
        if total > 0.7:
            suppression = (total - 0.7) * 2.0
            s.crh *= 1.0 - clamp(suppression * 0.6 * weight)
            s.acth *= 1.0 - clamp(suppression * 0.5 * weight)
        elif total > 0.3:
            suppression = (total - 0.3) * 0.5
            s.crh *= 1.0 - clamp(suppression * 0.3 * weight)
        elif total < 0.15:
            s.crh = clamp(s.crh + 0.02 * weight)

    def _rebalance_autonomic(self, hours: float) -> None:
        s = self._state
        weight = exp_weight(hours, FEEDBACK_TAU_HOURS)
        total = self.total_cortisol()
        sympathetic = clamp(0.3 + (total - CORTISOL_BASE) * 0.5)
        targets = {
            "sympathetic_tone": sympathetic,
            "parasympathetic_tone": 1.0 - sympathetic,
            "vagal_tone": 0.65 - sympathetic * 0.3,
            "norepinephrine": sympathetic * 0.5 + s.acute_stress * 0.5,
        }
        for name, target in targets.items():
            current = getattr(s, name)
            setattr(s, name, clamp(current + (target - current) * weight))

        s.gr_occupancy = clamp(total * 0.75 * s.gr_sensitivity)
        s.mr_occupancy = clamp(total / (total + 0.2)) if total > 0 else 0.0
        s.glucose_mobilization = clamp(0.2 + (total - CORTISOL_BASE) * 0.8 + s.acute_stress * 0.3)
        s.lipolysis = clamp(0.1 + (total - CORTISOL_BASE) * 0.5)
        s.protein_catabolism = clamp(0.05 + s.chronic_stress * 0.3)
        s.thyroid_suppression = clamp(s.chronic_stress * 0.4)
        for name in ("crh", "acth", "cortisol_free", "cortisol_bound"):
            setattr(s, name, clamp(getattr(s, name)))

    def update_circadian_phase(self, hour: float, sleep_debt: float = 0.0) -> None:
        """Track the morning-peak, midnight-trough cortisol rhythm."""
        s = self._state
        hour = float(hour) % 24.0
        if 5.5 <= hour < 8.0:
            modulation = math.sin((hour - 5.5) / 2.5 * math.pi) * 0.3
        elif 8.0 <= hour < 18.0:
            modulation = 0.2 - ((hour - 8.0) / 10.0) * 0.3
        else:
            night_hour = hour + 24.0 if hour < 5.5 else hour
            modulation = -0.1 - 0.05 * math.exp(-abs(night_hour - 24.0) / 2.0)
        s.circadian_phase = hour
        self._update_circadian_markers(sleep_debt)
        deprivation = self._sleep_deprivation(sleep_debt)
        drive = 0.2 + modulation
        if modulation > 0:
            drive = 0.2 + modulation * (1.0 - deprivation * 0.3) * (1.0 - self.dysregulation * 0.5)
        s.circadian_drive = clamp(drive + deprivation * 0.05)

    @staticmethod
    def _sleep_deprivation(sleep_debt: float) -> float:
        if sleep_debt <= 2.0:
            return 0.0
        return clamp((sleep_debt - 2.0) / 8.0)

    def _update_circadian_markers(self, sleep_debt: float) -> None:
        s = self._state
        deprivation = self._sleep_deprivation(sleep_debt)
        dys = self.dysregulation
        s.morning_cortisol = clamp(0.4 * (1.0 - dys * 0.5) * (1.0 - deprivation * 0.3))
        s.evening_cortisol = clamp(0.1 + dys * 0.15 + deprivation * 0.1)
        s.cortisol_awakening_response = clamp(0.15 * (1.0 - dys * 0.5))

    def update_immune_function(self, sleep_debt: float = 0.0, oxytocin: float = 0.1) -> None:
        s = self._state
        total = self.total_cortisol()
        oxytocin = clamp(oxytocin)
        s.immune_suppression = clamp(total * 0.8)
        function = 0.95 - s.immune_suppression * 0.3 - s.chronic_stress * 0.2
        if sleep_debt > 2.0:
            function -= (sleep_debt - 2.0) * 0.05
        if oxytocin > 0.5:
            function += (oxytocin - 0.5) * 0.15
        s.immune_function = clamp(function)
        inflammation = 0.05 + s.chronic_stress * 0.2 + (1.0 - s.immune_function) * 0.2 - s.acute_stress * 0.1
        if sleep_debt > 1.0:
            inflammation += (sleep_debt - 1.0) * 0.05
        s.inflammation_marker = clamp(inflammation)

    # ------------------------------------------------------------------
    # Scaling hooks invoked by the orchestrator
    # ------------------------------------------------------------------
    def apply_cycle_modulation(self, phase: str, estradiol: float) -> None:
        if phase == "luteal_late":
            reactivity = 1.3
        elif phase in ("follicular", "ovulation"):
            reactivity = 1.0 - clamp(estradiol) * 0.3
        else:
            reactivity = 1.0
        self._state.reactivity = reactivity

    def apply_sexual_modulation(self, oxytocin: float, weight: float = 1.0) -> None:
        s = self._state
        oxytocin = clamp(oxytocin)
        if oxytocin <= 0.5:
            s.sexual_hpa_suppression = 0.0
            return
        strength = (oxytocin - 0.5) * 0.4
        scaled = strength * clamp(weight)
        s.sexual_hpa_suppression = strength
        s.cortisol_free = clamp(s.cortisol_free * (1.0 - scaled))
        s.crh = clamp(s.crh * (1.0 - scaled * 0.3))
        s.parasympathetic_tone = clamp(s.parasympathetic_tone + scaled * 0.2)

    # ------------------------------------------------------------------
    # Clinical placeholders
    # ------------------------------------------------------------------
    def dexamethasone_suppression_test(self) -> float:
        """Return the residual cortisol fraction after a simulated dose."""
        s = self._state
        residual = clamp(self.total_cortisol() * (1.0 - 0.8 * s.gr_sensitivity) + s.allostatic_load * 0.2)
        s.dexamethasone_suppression_level = residual
        return residual

    def acth_stimulation_test(self) -> float:
        s = self._state
        response = clamp(s.cortisol_free + 0.5 * (1.0 - s.allostatic_load) * s.recovery_capacity)
        s.acth_stimulation_response = response
        return response

    def dysregulation_indicators(self) -> dict[str, bool]:
        s = self._state
        return {
            "flattened_rhythm": abs(s.morning_cortisol - s.evening_cortisol) < 0.15,
            "elevated_evening": s.evening_cortisol > 0.2,
            "impaired_recovery": s.recovery_capacity < 0.7,
            "elevated_basal": self.total_cortisol() > 0.35,
            "sensitized": s.sensitization > 0.5,
            "autonomic_imbalance": s.sympathetic_tone > 0.6 or s.vagal_tone < 0.4,
        }

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def serialize(self) -> dict[str, Any]:
        return self._state.as_dict()

    @classmethod
    def deserialize(cls, record: Mapping[str, Any]) -> "HPAAxis":
        return cls(HPAState.from_dict(record))


__all__ = ["CORTISOL_BASE", "HPAAxis", "HPAState"]
