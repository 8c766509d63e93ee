"""Tick pipeline: the ordered stages that turn one trigger into a new snapshot.

Stages run in a fixed order (modulating, physio stepping, reconciling,
decaying, deriving). Each stage takes and returns an immutable snapshot; the
subsystems handed in are working copies owned by the caller, so a failed tick
can simply be discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from bridges import (
    AffectDimensions,
    PhaseSyncHistory,
    affect_quadrant,
    affect_to_state,
    circadian_hormone_factor,
    phase_response,
    state_to_affect,
    synchronize_cycles,
)
from hormones import HormonalCycle, HPAAxis, decay_toward_baseline
from hormones.homeostasis import baseline_for
from hormones.hpa import CORTISOL_BASE
from memory import AffectiveMemoryRecord, AffectiveMemoryStore, RetrievedMemory
from physiology import Stimulus, build_sexual_context, feedback_text, recover, step, vocalization_flag
from snapshot import StateSnapshot
from utils.numeric import clamp, exp_weight

from .clock import CircadianClock
from .cognition import CognitiveAppraisal, apply_appraisal, appraise, memory_pressure
from .emotions import circadian_emotion_overlay, classify_mood, derive_emotions, hpa_emotion_overlay
from .modulation import apply_hpa_effects, circadian_neuro_modulation, feedback_loops, trigger_endorphin_rush
from .personality import PersonalityCollaborator

logger = logging.getLogger("somatic.pipeline")

MIN_TICK_MS = 100.0
MS_PER_HOUR = 3_600_000.0
STRESSOR_FLOOR = 0.05
AFFECT_STRENGTH = 0.1

STAGES = ("modulating", "physio_stepping", "reconciling", "decaying", "deriving")


@dataclass(frozen=True)
class Zeitgeber:
    """Entraining event such as light exposure or a meal."""

    type: str
    intensity: float
    duration_minutes: float


@dataclass(frozen=True)
class Trigger:
    """One interaction event plus the simulated time since the previous one."""

    elapsed_ms: float
    user_text: str | None = None
    response_text: str | None = None
    stimulus: Stimulus | None = None
    affect: AffectDimensions | None = None
    stressor: float = 0.0
    stress_type: str | None = None
    zeitgeber: Zeitgeber | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def hours(self) -> float:
        return max(0.0, float(self.elapsed_ms)) / MS_PER_HOUR


@dataclass
class Subsystems:
    """Stateful models advanced by the pipeline."""

    cycle: HormonalCycle
    hpa: HPAAxis
    memory: AffectiveMemoryStore
    clock: CircadianClock
    history: PhaseSyncHistory


@dataclass(frozen=True)
class TickOutcome:
    snapshot: StateSnapshot
    appraisal: CognitiveAppraisal
    retrieved: tuple[RetrievedMemory, ...] = ()
    encoded: AffectiveMemoryRecord | None = None
    climaxed: bool = False
    arousal_delta: float = 0.0
    stages: tuple[str, ...] = STAGES


@dataclass(frozen=True)
class StimulusOutcome:
    snapshot: StateSnapshot
    feedback_text: str
    vocalization: bool


@dataclass
class _TickContext:
    trigger: Trigger
    subsystems: Subsystems
    personality: PersonalityCollaborator
    hours: float
    appraisal: CognitiveAppraisal = field(default_factory=CognitiveAppraisal)
    retrieved: tuple[RetrievedMemory, ...] = ()
    climaxed: bool = False
    arousal_delta: float = 0.0


def _neuroticism(personality: PersonalityCollaborator) -> float:
    return float(personality.get_state().get("neuroticism", 0.4))


# ----------------------------------------------------------------------
# Stages
# ----------------------------------------------------------------------
def _modulating(snapshot: StateSnapshot, ctx: _TickContext) -> StateSnapshot:
    trigger, subsystems = ctx.trigger, ctx.subsystems
    subsystems.clock.advance(ctx.hours)
    if trigger.user_text:
        subsystems.clock.record_activity()
        retrieved = subsystems.memory.retrieve(trigger.user_text, snapshot.emotions, limit=3)
        for item in retrieved:
            subsystems.memory.reinforce(item.record.id)
        ctx.retrieved = tuple(retrieved)
    neuroticism = _neuroticism(ctx.personality)
    ctx.appraisal = appraise(ctx.retrieved, trigger.user_text, neuroticism=neuroticism)
    snapshot = apply_appraisal(snapshot, ctx.appraisal, neuroticism=neuroticism)
    if trigger.affect is not None:
        snapshot = affect_to_state(trigger.affect, snapshot, AFFECT_STRENGTH)
    return snapshot


def _physio_stepping(snapshot: StateSnapshot, ctx: _TickContext) -> StateSnapshot:
    trigger, subsystems, hours = ctx.trigger, ctx.subsystems, ctx.hours
    cycle, hpa, clock = subsystems.cycle, subsystems.hpa, subsystems.clock

    cycle.advance(hours)
    stress = hpa.projection()
    cycle.apply_stress(max(stress.acute_stress, stress.chronic_stress))
    cycle.integrate_hpa_axis(hpa.total_cortisol(), stress.crh, weight=exp_weight(hours, 24.0))
    snapshot = cycle.modulate(snapshot, weight=exp_weight(hours, 6.0))

    hpa.apply_cycle_modulation(cycle.current_phase(), snapshot.neuro.estradiol)
    stressor = max(clamp(trigger.stressor), ctx.appraisal.stress_load)
    if stressor > STRESSOR_FLOOR:
        hpa.apply_acute_stress(stressor, context=snapshot.emotions.as_dict(), stress_type=trigger.stress_type)
    hpa.apply_sexual_modulation(snapshot.neuro.oxytocin, weight=exp_weight(hours, 0.5))
    seconds = hours * 3600.0
    hpa.process_lags(seconds)
    hpa.advance_recovery(seconds)
    hpa.update_circadian_phase(clock.internal_hour, clock.sleep_debt)
    hpa.update_immune_function(clock.sleep_debt, snapshot.neuro.oxytocin)
    stress = hpa.projection()

    neuro = snapshot.neuro
    cortisol_target = baseline_for("neuro", "cortisol") + (hpa.total_cortisol() - CORTISOL_BASE)
    cortisol_target += (hpa.state.circadian_drive - 0.2) * 0.5
    neuro = neuro.update(cortisol=neuro.cortisol + (cortisol_target - neuro.cortisol) * exp_weight(hours, 0.25))
    snapshot = snapshot.evolve(neuro=neuro, stress=stress).clamped()

    weight = exp_weight(hours, 1.0)
    snapshot = apply_hpa_effects(snapshot, stress, weight)
    snapshot = circadian_neuro_modulation(
        snapshot,
        clock.hour_of_day,
        clock.sleep_debt,
        weight,
        ultradian_multiplier=clock.ultradian_multiplier(),
    )
    snapshot = feedback_loops(snapshot, weight)
    ctx.personality.update_from_biological_state(snapshot)

    if trigger.stimulus is not None and trigger.stimulus.type != "touch_end":
        context = build_sexual_context(snapshot, trauma_history=bool(subsystems.memory.trauma_records()))
        result = step(trigger.stimulus, snapshot.intimate, snapshot.neuro, snapshot.cycle.cycle_phase, context)
        snapshot = snapshot.evolve(intimate=result.intimate, neuro=result.neuro)
        if result.climaxed:
            snapshot = trigger_endorphin_rush(snapshot, 1.0)
        ctx.climaxed = result.climaxed
        ctx.arousal_delta = result.arousal_delta
    return snapshot.clamped()


def _reconciling(snapshot: StateSnapshot, ctx: _TickContext) -> StateSnapshot:
    trigger, subsystems = ctx.trigger, ctx.subsystems
    clock, history = subsystems.clock, subsystems.history
    if trigger.zeitgeber is not None:
        shift = phase_response(
            trigger.zeitgeber.type,
            trigger.zeitgeber.intensity,
            trigger.zeitgeber.duration_minutes,
            clock.hour_of_day,
        )
        clock.apply_phase_shift(shift.magnitude)
        logger.debug("Zeitgeber %s shifted the clock by %.3f h (%s)", trigger.zeitgeber.type, shift.magnitude, shift.direction)

    hour = clock.hour_of_day
    neuro = snapshot.neuro.update(
        testosterone=snapshot.neuro.testosterone * circadian_hormone_factor("testosterone", hour),
        estradiol=snapshot.neuro.estradiol * circadian_hormone_factor("estradiol", hour),
    )
    sync = synchronize_cycles(snapshot.cycle.cycle_day, hour, snapshot.cycle.cycle_length)
    if history.due(clock.clock_hours):
        history.record(sync, clock.clock_hours)
    metrics = history.chronodisruption()
    chronodisruption = sync.disruption if metrics["severity"] == "insufficient_data" else metrics["score"]
    synced = snapshot.sync.update(
        phase_coherence=sync.coherence,
        chronodisruption=chronodisruption,
        phase_angle=sync.phase_difference,
    )
    return snapshot.evolve(neuro=neuro, sync=synced).clamped()


def _decaying(snapshot: StateSnapshot, ctx: _TickContext) -> StateSnapshot:
    snapshot = decay_toward_baseline(snapshot, ctx.hours)
    ctx.subsystems.memory.decay_and_consolidate(ctx.hours)
    return snapshot.evolve(intimate=recover(snapshot.intimate, ctx.hours))


def _deriving(snapshot: StateSnapshot, ctx: _TickContext) -> StateSnapshot:
    return derive_state(snapshot, ctx.subsystems)


def derive_state(snapshot: StateSnapshot, subsystems: Subsystems) -> StateSnapshot:
    """Recompute emotions, affect coordinates, and the mood label."""
    memory, clock = subsystems.memory, subsystems.clock
    pressure = memory_pressure(memory.recent_negative(), memory.trauma_records())
    emotions = derive_emotions(snapshot, **pressure)
    emotions = subsystems.cycle.modulate_emotions(emotions)
    emotions, meta = circadian_emotion_overlay(emotions, snapshot.meta, clock.hour_of_day, clock.sleep_debt)
    emotions = hpa_emotion_overlay(emotions, snapshot.stress, snapshot.neuro.cortisol)
    snapshot = snapshot.evolve(emotions=emotions.clamped(), meta=meta).clamped()

    affect = state_to_affect(snapshot)
    sync = snapshot.sync.update(
        valence=affect.valence,
        arousal=affect.arousal,
        dominance=affect.dominance,
        quadrant=affect_quadrant(affect),
    )
    snapshot = snapshot.evolve(sync=sync)
    return snapshot.evolve(mood=classify_mood(snapshot)).clamped()


_STAGE_FUNCTIONS = (_modulating, _physio_stepping, _reconciling, _decaying, _deriving)


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------
def run_tick(
    trigger: Trigger,
    previous: StateSnapshot,
    subsystems: Subsystems,
    personality: PersonalityCollaborator,
    *,
    min_tick_ms: float = MIN_TICK_MS,
) -> TickOutcome | None:
    """Advance ``previous`` by one trigger; sub-threshold triggers return ``None``."""
    if trigger.elapsed_ms < min_tick_ms:
        return None
    ctx = _TickContext(trigger=trigger, subsystems=subsystems, personality=personality, hours=trigger.hours)
    snapshot = previous
    for stage in _STAGE_FUNCTIONS:
        snapshot = stage(snapshot, ctx)

    encoded = None
    if trigger.user_text:
        encoded = subsystems.memory.encode(
            trigger.user_text,
            trigger.response_text or "",
            snapshot,
            dict(trigger.metadata),
        )
    snapshot = snapshot.evolve(
        clock_hours=subsystems.clock.clock_hours,
        tick_count=previous.tick_count + 1,
    )
    return TickOutcome(
        snapshot=snapshot,
        appraisal=ctx.appraisal,
        retrieved=ctx.retrieved,
        encoded=encoded,
        climaxed=ctx.climaxed,
        arousal_delta=ctx.arousal_delta,
    )


def run_stimulus(stimulus: Stimulus, previous: StateSnapshot, subsystems: Subsystems) -> StimulusOutcome:
    """Apply one intimate stimulus without advancing time."""
    if stimulus.type == "touch_end":
        snapshot = derive_state(previous, subsystems)
        return StimulusOutcome(snapshot=snapshot, feedback_text="Contact ended.", vocalization=False)

    context = build_sexual_context(previous, trauma_history=bool(subsystems.memory.trauma_records()))
    result = step(stimulus, previous.intimate, previous.neuro, previous.cycle.cycle_phase, context)
    snapshot = previous.evolve(intimate=result.intimate, neuro=result.neuro)
    if result.climaxed:
        snapshot = trigger_endorphin_rush(snapshot, 1.0)
    snapshot = derive_state(snapshot.clamped(), subsystems)
    return StimulusOutcome(
        snapshot=snapshot,
        feedback_text=feedback_text(result),
        vocalization=vocalization_flag(result.intimate.arousal, result.arousal_delta, result.climaxed),
    )


__all__ = [
    "MIN_TICK_MS",
    "STAGES",
    "StimulusOutcome",
    "Subsystems",
    "TickOutcome",
    "Trigger",
    "Zeitgeber",
    "derive_state",
    "run_stimulus",
    "run_tick",
]
