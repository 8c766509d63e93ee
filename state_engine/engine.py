"""Core state engine coordinating the cycle, stress axis, memory, and clock."""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from bridges import PhaseSyncHistory
from hormones import ChaosSource, HormonalCycle, HPAAxis, endocrine_trace
from memory import AffectiveMemoryRecord, AffectiveMemoryStore
from physiology import Stimulus
from snapshot import StateSnapshot
from utils.serialization import StateRestoreError, coerce_value, require_keys

from .clock import CircadianClock
from .personality import BigFiveTraits, Personality, PersonalityCollaborator
from .pipeline import MIN_TICK_MS, StimulusOutcome, Subsystems, Trigger, derive_state, run_stimulus, run_tick

logger = logging.getLogger("somatic.engine")

BUNDLE_VERSION = 1


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class StateEngine:
    """Advance the simulated persona by reconciling hormones, stress, and memories."""

    def __init__(
        self,
        *,
        persona_age: float = 25.0,
        initial_cycle_day: int = 1,
        start_hour: float = 8.0,
        chronotype: str = "intermediate",
        memory_capacity: int = 200,
        min_tick_ms: float = MIN_TICK_MS,
        chaos: ChaosSource | None = None,
        personality: PersonalityCollaborator | None = None,
    ) -> None:
        self.persona_age = persona_age
        self.initial_cycle_day = initial_cycle_day
        self.start_hour = start_hour
        self.chronotype = chronotype
        self.memory_capacity = memory_capacity
        self.min_tick_ms = min_tick_ms
        self._chaos = chaos or ChaosSource()
        self._personality_factory = type(personality) if personality is not None else Personality
        self.personality: PersonalityCollaborator = personality or Personality()
        self._lock = asyncio.Lock()
        self._initialize_state()

    @classmethod
    def from_settings(cls, settings: Any) -> "StateEngine":
        return cls(
            persona_age=settings.persona_age,
            initial_cycle_day=settings.initial_cycle_day,
            start_hour=settings.start_hour,
            chronotype=settings.chronotype,
            memory_capacity=settings.memory_capacity,
            min_tick_ms=settings.min_tick_ms,
        )

    def _initialize_state(self) -> None:
        """Build fresh subsystems and derive the first snapshot from them."""
        self.subsystems = Subsystems(
            cycle=HormonalCycle(age=self.persona_age, start_day=self.initial_cycle_day, chaos=self._chaos),
            hpa=HPAAxis(),
            memory=AffectiveMemoryStore(capacity=self.memory_capacity),
            clock=CircadianClock(chronotype=self.chronotype, start_hour=self.start_hour),
            history=PhaseSyncHistory(),
        )
        seeded = self.subsystems.cycle.modulate(StateSnapshot(), weight=0.0)
        seeded = seeded.evolve(stress=self.subsystems.hpa.projection())
        self.state = derive_state(seeded, self.subsystems)
        self._updated_at = _timestamp()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------
    async def tick(self, trigger: Trigger) -> StateSnapshot:
        """Advance every subsystem by one trigger and commit the result atomically."""
        async with self._lock:
            if trigger.elapsed_ms < self.min_tick_ms:
                return self.state
            subsystems = copy.deepcopy(self.subsystems)
            personality = copy.deepcopy(self.personality)
            try:
                outcome = run_tick(trigger, self.state, subsystems, personality, min_tick_ms=self.min_tick_ms)
            except Exception:
                logger.exception("Tick failed after %.0f ms trigger; keeping previous snapshot", trigger.elapsed_ms)
                raise
            if outcome is None:
                return self.state
            self.subsystems = subsystems
            self.personality = personality
            self.state = outcome.snapshot
            self._updated_at = _timestamp()
            if outcome.climaxed:
                logger.debug("Climax registered at tick %s", self.state.tick_count)
            return self.state

    async def apply_stimulus(self, stimulus_type: str, pressure: float, velocity: float = 0.0) -> StimulusOutcome:
        """Apply one intimate stimulus; no simulated time passes."""
        async with self._lock:
            subsystems = copy.deepcopy(self.subsystems)
            try:
                outcome = run_stimulus(Stimulus(stimulus_type, pressure, velocity), self.state, subsystems)
            except Exception:
                logger.exception("Stimulus '%s' failed; keeping previous snapshot", stimulus_type)
                raise
            self.subsystems = subsystems
            self.state = outcome.snapshot
            self._updated_at = _timestamp()
            return outcome

    async def apply_stress(
        self,
        magnitude: float,
        *,
        stress_type: str | None = None,
        chronic_hours: float = 0.0,
    ) -> StateSnapshot:
        """Queue an acute stressor, or accumulate chronic load when ``chronic_hours`` is given."""
        async with self._lock:
            hpa = copy.deepcopy(self.subsystems.hpa)
            if chronic_hours > 0:
                hpa.apply_chronic_stress(magnitude, chronic_hours)
            else:
                hpa.apply_acute_stress(magnitude, context=self.state.emotions.as_dict(), stress_type=stress_type)
            self.subsystems.hpa = hpa
            self.state = self.state.evolve(stress=hpa.projection())
            return self.state

    async def record_trauma(self, stimulus: str, intensity: float, *, repress: bool = False) -> AffectiveMemoryRecord:
        async with self._lock:
            record = self.subsystems.memory.create_traumatic_memory(stimulus, intensity, repress=repress)
            self.subsystems.hpa.apply_trauma_effects(intensity, 0.0)
            self.state = self.state.evolve(stress=self.subsystems.hpa.projection())
            return record

    async def set_persona_age(self, age: float) -> float:
        """Re-anchor age-dependent cycle baselines; returns the clamped age."""
        async with self._lock:
            self.subsystems.cycle.set_age(age)
            self.persona_age = self.subsystems.cycle.state.age
            logger.info("Persona age set to %.1f", self.persona_age)
            return self.persona_age

    async def clinical_probes(self) -> dict[str, float]:
        """Run the simulated dexamethasone and ACTH probes against the current axis."""
        async with self._lock:
            hpa = self.subsystems.hpa
            return {
                "dexamethasone_suppression": hpa.dexamethasone_suppression_test(),
                "acth_stimulation": hpa.acth_stimulation_test(),
            }

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def snapshot(self) -> StateSnapshot:
        """Return the latest committed snapshot."""
        return self.state

    def get_state(self) -> dict[str, Any]:
        """Return a plain state payload suitable for API responses."""
        payload = self.state.as_dict()
        payload["timestamp"] = self._updated_at
        payload["clock"] = self.subsystems.clock.get_state()
        payload["personality"] = dict(self.personality.get_state())
        traits = getattr(self.personality, "traits", None)
        if isinstance(traits, BigFiveTraits):
            payload["dominant_traits"] = traits.dominant_traits()
        return payload

    def endocrine_snapshot(self) -> dict[str, Any]:
        """Expose the latest endocrine trace for logging."""
        trace = endocrine_trace(self.state)
        trace["timestamp"] = self._updated_at
        return trace

    def cycle_report(self) -> dict[str, Any]:
        cycle, hpa = self.subsystems.cycle, self.subsystems.hpa
        return {
            "cycle": cycle.get_state(),
            "fertility": cycle.fertility_status(),
            "pmdd": cycle.pmdd_assessment(),
            "phase_profile": {name: list(days) for name, days in cycle.phase_profile().items()},
            "hpa": hpa.get_state(),
            "dysregulation": hpa.dysregulation_indicators(),
            "chronodisruption": self.subsystems.history.chronodisruption(),
        }

    def memories(self, limit: int | None = None) -> list[dict[str, Any]]:
        records = self.subsystems.memory.records()
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return [record.as_dict() for record in records]

    def reset(self) -> None:
        """Reinitialize every subsystem without recreating the engine."""
        self.personality = self._personality_factory()
        self._initialize_state()
        logger.info("Engine reset to a fresh persona")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def serialize(self) -> dict[str, Any]:
        personality = self.personality.serialize() if hasattr(self.personality, "serialize") else None
        return {
            "version": BUNDLE_VERSION,
            "settings": {
                "persona_age": self.persona_age,
                "initial_cycle_day": self.initial_cycle_day,
                "start_hour": self.start_hour,
                "chronotype": self.chronotype,
                "memory_capacity": self.memory_capacity,
                "min_tick_ms": self.min_tick_ms,
            },
            "snapshot": self.state.as_dict(),
            "cycle": self.subsystems.cycle.serialize(),
            "hpa": self.subsystems.hpa.serialize(),
            "memory": self.subsystems.memory.serialize(),
            "clock": self.subsystems.clock.serialize(),
            "history": self.subsystems.history.serialize(),
            "personality": personality,
        }

    @classmethod
    def deserialize(
        cls,
        record: Mapping[str, Any],
        *,
        chaos: ChaosSource | None = None,
        personality: PersonalityCollaborator | None = None,
    ) -> "StateEngine":
        """Rebuild an engine from a :meth:`serialize` bundle.

        Any malformed part of the bundle raises :class:`StateRestoreError`.
        A custom ``personality`` collaborator replaces the stored one and its
        type is reused by :meth:`reset`; without it the stored default
        personality is restored.
        """
        context = "StateEngine.settings"
        data = require_keys(
            record,
            ("version", "settings", "snapshot", "cycle", "hpa", "memory", "clock", "history", "personality"),
            context="StateEngine",
        )
        if data["version"] != BUNDLE_VERSION:
            raise StateRestoreError(f"Unsupported engine bundle version {data['version']!r}")
        settings = require_keys(
            data["settings"],
            ("persona_age", "initial_cycle_day", "start_hour", "chronotype", "memory_capacity", "min_tick_ms"),
            context=context,
        )
        engine = cls.__new__(cls)
        engine.persona_age = coerce_value(settings["persona_age"], "float", name="persona_age", context=context)
        engine.initial_cycle_day = coerce_value(
            settings["initial_cycle_day"], "int", name="initial_cycle_day", context=context
        )
        engine.start_hour = coerce_value(settings["start_hour"], "float", name="start_hour", context=context)
        engine.chronotype = coerce_value(settings["chronotype"], "str", name="chronotype", context=context)
        engine.memory_capacity = coerce_value(
            settings["memory_capacity"], "int", name="memory_capacity", context=context
        )
        engine.min_tick_ms = coerce_value(settings["min_tick_ms"], "float", name="min_tick_ms", context=context)
        engine._chaos = chaos or ChaosSource()
        engine._lock = asyncio.Lock()
        try:
            engine.subsystems = Subsystems(
                cycle=HormonalCycle.deserialize(data["cycle"], chaos=engine._chaos),
                hpa=HPAAxis.deserialize(data["hpa"]),
                memory=AffectiveMemoryStore.deserialize(data["memory"]),
                clock=CircadianClock.deserialize(data["clock"]),
                history=PhaseSyncHistory.deserialize(data["history"]),
            )
            if personality is not None:
                engine.personality = personality
            elif data["personality"] is None:
                engine.personality = Personality()
            else:
                engine.personality = Personality.deserialize(data["personality"])
            engine.state = StateSnapshot.from_dict(data["snapshot"])
        except StateRestoreError:
            raise
        except (TypeError, ValueError) as exc:
            raise StateRestoreError(f"Malformed engine bundle: {exc}") from exc
        engine._personality_factory = type(personality) if personality is not None else Personality
        engine._updated_at = _timestamp()
        return engine

    @classmethod
    def restore_or_fresh(
        cls,
        record: Mapping[str, Any] | None,
        *,
        personality: PersonalityCollaborator | None = None,
        **kwargs: Any,
    ) -> "StateEngine":
        """Restore from ``record``, falling back to a fresh engine when it is malformed."""
        if record is None:
            return cls(personality=personality, **kwargs)
        try:
            return cls.deserialize(record, chaos=kwargs.get("chaos"), personality=personality)
        except StateRestoreError as exc:
            logger.warning("Could not restore engine state (%s); starting fresh", exc)
            return cls(personality=personality, **kwargs)


__all__ = ["BUNDLE_VERSION", "StateEngine"]
