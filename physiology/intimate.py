"""Sexual/intimate physiology: arousal, engorgement, climax potential, refractory state.

``step`` is pure: it takes the current intimate record and neurochemistry and
returns new ones. The response cycle is an explicit two-state machine,
``building`` and ``refractory``; the single transition edge is climax
potential crossing ``CLIMAX_CEILING`` while building.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from snapshot import IntimateState, Neurochemistry, StateSnapshot
from utils.numeric import clamp, half_life_factor

logger = logging.getLogger("somatic.intimate")

CLIMAX_CEILING = 0.95
ACCELERATOR_THRESHOLD = 0.8
REFRACTORY_HOURS = 0.25
POST_CLIMAX_AROUSAL = 0.5
POST_CLIMAX_TENSION = 0.8
POST_CLIMAX_INHIBITION = 0.8

NERVE_GAINS: dict[str, float] = {
    "direct_contact": 1.0,
    "internal_pressure": 0.8,
    "pelvic_floor_contraction": 0.5,
}
DEFAULT_NERVE_GAIN = 0.3
STIMULUS_TYPES = (*NERVE_GAINS, "touch", "caress", "kiss", "touch_end")

_RESTING = IntimateState()


@dataclass(frozen=True)
class PhaseResponse:
    responsivity: float
    lubrication: float
    desire: float
    discomfort: float


PHASE_RESPONSE: dict[str, PhaseResponse] = {
    "menstrual": PhaseResponse(0.6, 0.2, 0.3, 0.5),
    "follicular": PhaseResponse(0.95, 0.6, 0.8, 0.0),
    "ovulation": PhaseResponse(1.3, 0.9, 1.0, -0.1),
    "luteal_early": PhaseResponse(0.9, 0.5, 0.7, 0.1),
    "luteal_late": PhaseResponse(0.5, 0.3, 0.2, 0.6),
}
DEFAULT_RESPONSE = PhaseResponse(0.7, 0.4, 0.5, 0.0)


@dataclass(frozen=True)
class Stimulus:
    type: str
    pressure: float
    velocity: float = 0.0


@dataclass(frozen=True)
class SexualContext:
    """Relational and stress context for one stimulus step."""

    relationship_quality: float = 0.5
    emotional_intimacy: float = 0.3
    felt_safety: float = 0.7
    trauma_history: bool = False
    acute_stress: float = 0.0
    chronic_stress: float = 0.0
    anxiety: float = 0.2


@dataclass(frozen=True)
class IntimateStepResult:
    intimate: IntimateState
    neuro: Neurochemistry
    climaxed: bool
    arousal_delta: float


def build_sexual_context(snapshot: StateSnapshot, *, trauma_history: bool = False) -> SexualContext:
    neuro, meta = snapshot.neuro, snapshot.meta
    return SexualContext(
        relationship_quality=clamp(meta.loyalty_construct * 0.5 + neuro.oxytocin * 0.5),
        emotional_intimacy=neuro.oxytocin,
        felt_safety=clamp(neuro.oxytocin * 0.7 + (1.0 - neuro.cortisol) * 0.3),
        trauma_history=trauma_history,
        acute_stress=snapshot.stress.acute_stress,
        chronic_stress=snapshot.stress.chronic_stress,
        anxiety=meta.anxiety,
    )


def step(
    stimulus: Stimulus,
    intimate: IntimateState,
    neuro: Neurochemistry,
    cycle_phase: str,
    context: SexualContext | None = None,
) -> IntimateStepResult:
    """Advance the intimate response by one stimulus event."""
    ctx = context or SexualContext()
    response = PHASE_RESPONSE.get(cycle_phase, DEFAULT_RESPONSE)

    # Stress modulation is computed per step and never written back.
    vasoconstriction = clamp(1.0 - (neuro.norepinephrine * 0.6 + ctx.acute_stress * 0.4))
    sensitivity = clamp(intimate.sensitivity * (1.0 - ctx.acute_stress * 0.5))
    inhibition = intimate.inhibition + (neuro.cortisol * 0.4 + ctx.anxiety * 0.6) * 0.5
    if ctx.felt_safety < 0.5:
        inhibition += (0.5 - ctx.felt_safety) * 0.3
        if ctx.trauma_history:
            inhibition += 0.2
    inhibition = clamp(inhibition)
    libido = neuro.libido
    if ctx.chronic_stress > 0.4:
        libido *= 1.0 - ctx.chronic_stress * 0.5

    strength = clamp(stimulus.pressure) * (1.0 + max(0.0, stimulus.velocity) * 0.005)
    nerve = clamp(strength * NERVE_GAINS.get(stimulus.type, DEFAULT_NERVE_GAIN) * sensitivity)
    desire = libido * (1.0 + neuro.dopamine) * (0.5 + response.desire * 0.5)
    drive = (nerve * 0.6 + desire * 0.4) * (1.0 - inhibition) * response.responsivity
    drive *= 1.0 - max(0.0, response.discomfort) * 0.3

    previous_arousal = intimate.arousal
    arousal = clamp(previous_arousal + (drive - previous_arousal * 0.1) * 0.2)
    potential = intimate.climax_potential

    voluntary = 0.4 if stimulus.type == "pelvic_floor_contraction" else 0.0
    tension = clamp(intimate.pelvic_floor_tension * 0.9 + arousal * (0.5 + potential) * 0.1 + voluntary * 0.2)
    tumescence_target = arousal * (1.0 + neuro.estradiol * 0.3) * vasoconstriction
    tumescence = clamp(intimate.tumescence + (tumescence_target - intimate.tumescence) * 0.15)
    wetness_target = (arousal * tumescence + neuro.estradiol * 0.5) * (0.5 + response.lubrication * 0.5)
    wetness = clamp(intimate.wetness + (wetness_target - intimate.wetness) * 0.12)
    vulnerability = clamp(intimate.vulnerability + (arousal * (1.0 - inhibition) - intimate.vulnerability) * 0.05)

    if not intimate.refractory:
        build_up = arousal * tension * sensitivity
        accelerator = 1.0
        if potential > ACCELERATOR_THRESHOLD:
            accelerator += ((potential - ACCELERATOR_THRESHOLD) / 0.2) ** 2 * 2.0
        growth = build_up * 0.08 * accelerator
        # Past the point of no return the potential only decays without input.
        decay = 0.0 if potential > ACCELERATOR_THRESHOLD and growth > 0.0 else potential * 0.02
        potential = clamp(potential + growth - decay)

    climaxed = not intimate.refractory and potential > CLIMAX_CEILING
    if climaxed:
        updated = intimate.update(
            arousal=POST_CLIMAX_AROUSAL,
            tumescence=tumescence,
            wetness=wetness,
            climax_potential=0.0,
            pelvic_floor_tension=POST_CLIMAX_TENSION,
            inhibition=POST_CLIMAX_INHIBITION,
            vulnerability=vulnerability,
            refractory_hours=REFRACTORY_HOURS,
            response_phase="refractory",
            climax_count=intimate.climax_count + 1,
        )
        new_neuro = neuro.update(
            dopamine=neuro.dopamine + (arousal - previous_arousal) * 0.15,
            oxytocin=1.0,
            endorphin_rush=0.9,
            cortisol=neuro.cortisol * 0.3,
        )
        logger.debug("Climax reached (count=%s)", updated.climax_count)
    else:
        updated = intimate.update(
            arousal=arousal,
            tumescence=tumescence,
            wetness=wetness,
            climax_potential=potential,
            pelvic_floor_tension=tension,
            vulnerability=vulnerability,
        )
        new_neuro = neuro.update(
            dopamine=neuro.dopamine + (arousal - previous_arousal) * 0.15,
            oxytocin=neuro.oxytocin + arousal * 0.05,
        )
    return IntimateStepResult(
        intimate=updated,
        neuro=new_neuro,
        climaxed=climaxed,
        arousal_delta=updated.arousal - previous_arousal,
    )


def recover(intimate: IntimateState, hours: float) -> IntimateState:
    """Relax the intimate record toward rest and count down the refractory period."""
    if hours <= 0:
        return intimate
    fast = half_life_factor(hours, 0.5)
    slow = half_life_factor(hours, 1.0)
    refractory_hours = max(0.0, intimate.refractory_hours - hours)

    def relax(name: str, factor: float) -> float:
        rest = getattr(_RESTING, name)
        return rest + (getattr(intimate, name) - rest) * factor

    return intimate.update(
        arousal=intimate.arousal * fast,
        tumescence=relax("tumescence", slow),
        wetness=relax("wetness", slow),
        climax_potential=intimate.climax_potential * math.exp(-hours / 0.5),
        pelvic_floor_tension=relax("pelvic_floor_tension", fast),
        inhibition=relax("inhibition", fast),
        vulnerability=relax("vulnerability", slow),
        refractory_hours=refractory_hours,
        response_phase="refractory" if refractory_hours > 0.0 else "building",
    )


def vocalization_flag(arousal: float, arousal_delta: float, climaxed: bool) -> bool:
    """Deterministic vocalization cue for the presentation layer."""
    if climaxed:
        return True
    return clamp(arousal * 0.2 + arousal_delta * 8.0) >= 0.5


def feedback_text(result: IntimateStepResult) -> str:
    if result.climaxed:
        return "System overload... endorphin cascade initiated."
    return f"Sensory input registered. Arousal: {round(result.intimate.arousal * 100)}%"


__all__ = [
    "CLIMAX_CEILING",
    "IntimateStepResult",
    "PHASE_RESPONSE",
    "PhaseResponse",
    "SexualContext",
    "Stimulus",
    "build_sexual_context",
    "feedback_text",
    "recover",
    "step",
    "vocalization_flag",
]
