"""Integration tests for the state engine tick pipeline."""

from __future__ import annotations

import asyncio
import json
import unittest
from unittest import mock

from bridges import AffectDimensions
from hormones import BASELINES
from physiology import Stimulus
from snapshot import StateSnapshot
from state_engine import (
    BigFiveTraits,
    CircadianClock,
    Personality,
    StateEngine,
    Trigger,
    Zeitgeber,
    integrate_traits,
)
from state_engine.emotions import classify_mood
from state_engine.pipeline import STAGES
from utils.serialization import StateRestoreError

MINUTE_MS = 60_000.0
HOUR_MS = 3_600_000.0


class _FixedPersonality:
    def get_state(self) -> dict[str, float]:
        return {"openness": 0.5}

    def update_from_biological_state(self, snapshot: StateSnapshot) -> None:
        return None


class StateEngineTickTests(unittest.TestCase):
    def test_sub_threshold_trigger_is_a_no_op(self) -> None:
        engine = StateEngine()
        before = engine.snapshot()
        after = asyncio.run(engine.tick(Trigger(elapsed_ms=50.0, user_text="hello")))
        self.assertIs(after, before)
        self.assertEqual(after.tick_count, 0)
        self.assertEqual(engine.memories(), [])

    def test_tick_advances_clock_and_counter(self) -> None:
        engine = StateEngine()
        snapshot = asyncio.run(engine.tick(Trigger(elapsed_ms=HOUR_MS)))
        self.assertEqual(snapshot.tick_count, 1)
        self.assertAlmostEqual(snapshot.clock_hours, 1.0)
        self.assertEqual(engine.get_state()["clock"]["clock_hours"], 1.0)
        self.assertEqual(len(STAGES), 5)

    def test_negative_text_raises_stress_over_neutral_text(self) -> None:
        worried, neutral = StateEngine(), StateEngine()
        stressed = asyncio.run(
            worried.tick(Trigger(elapsed_ms=MINUTE_MS, user_text="I am stressed, worried, angry and scared"))
        )
        calm = asyncio.run(neutral.tick(Trigger(elapsed_ms=MINUTE_MS, user_text="the weather report for tuesday")))
        self.assertGreater(stressed.stress.acute_stress, calm.stress.acute_stress)
        self.assertGreater(stressed.neuro.cortisol, calm.neuro.cortisol)

    def test_extreme_triggers_keep_every_field_bounded(self) -> None:
        engine = StateEngine()
        trigger = Trigger(
            elapsed_ms=5 * HOUR_MS,
            user_text="I hate this, I am scared and angry",
            stimulus=Stimulus("direct_contact", 1.0, 50.0),
            affect=AffectDimensions(valence=5.0, arousal=5.0, dominance=-5.0),
            stressor=1.0,
            stress_type="social",
            zeitgeber=Zeitgeber("light", 1.0, 600.0),
        )
        for _ in range(4):
            snapshot = asyncio.run(engine.tick(trigger))
        for name, value, (low, high) in snapshot.iter_bounded_fields():
            with self.subTest(field=name):
                self.assertGreaterEqual(value, low)
                self.assertLessEqual(value, high)

    def test_very_long_tick_returns_to_baselines(self) -> None:
        engine = StateEngine()
        asyncio.run(engine.tick(Trigger(elapsed_ms=MINUTE_MS, user_text="angry and scared", stressor=0.9)))
        snapshot = asyncio.run(engine.tick(Trigger(elapsed_ms=1000 * HOUR_MS)))
        for section, baselines in BASELINES.items():
            for name, base in baselines.items():
                with self.subTest(field=f"{section}.{name}"):
                    self.assertAlmostEqual(getattr(getattr(snapshot, section), name), base, delta=0.01)

    def test_failed_tick_keeps_previous_state(self) -> None:
        engine = StateEngine()
        asyncio.run(engine.tick(Trigger(elapsed_ms=MINUTE_MS, user_text="we shared a lovely calm dinner")))
        before_state = engine.snapshot()
        before_bundle = json.dumps(engine.serialize(), sort_keys=True)
        with mock.patch("state_engine.engine.run_tick", side_effect=RuntimeError("boom")):
            with self.assertLogs("somatic.engine", level="ERROR"):
                with self.assertRaises(RuntimeError):
                    asyncio.run(engine.tick(Trigger(elapsed_ms=HOUR_MS)))
        self.assertIs(engine.snapshot(), before_state)
        self.assertEqual(json.dumps(engine.serialize(), sort_keys=True), before_bundle)

    def test_stimulus_and_touch_end(self) -> None:
        engine = StateEngine()
        outcome = asyncio.run(engine.apply_stimulus("caress", 0.8))
        self.assertIsInstance(outcome.feedback_text, str)
        self.assertGreater(outcome.snapshot.intimate.arousal, 0.0)
        self.assertEqual(outcome.snapshot.clock_hours, 0.0)
        ended = asyncio.run(engine.apply_stimulus("touch_end", 0.0))
        self.assertEqual(ended.feedback_text, "Contact ended.")
        self.assertFalse(ended.vocalization)
        self.assertEqual(ended.snapshot.intimate, outcome.snapshot.intimate)

    def test_stress_and_trauma_update_projection(self) -> None:
        engine = StateEngine()
        snapshot = asyncio.run(engine.apply_stress(0.7, stress_type="psychological"))
        self.assertGreater(snapshot.stress.acute_stress, 0.0)
        record = asyncio.run(engine.record_trauma("the accident", 0.8, repress=True))
        self.assertTrue(record.trauma)
        self.assertTrue(record.repressed)
        self.assertEqual(len(engine.memories()), 1)

    def test_age_update_and_clinical_probes(self) -> None:
        engine = StateEngine()
        self.assertEqual(asyncio.run(engine.set_persona_age(8.0)), 13.0)
        self.assertEqual(engine.serialize()["settings"]["persona_age"], 13.0)
        probes = asyncio.run(engine.clinical_probes())
        for value in probes.values():
            self.assertGreaterEqual(value, 0.0)
            self.assertLessEqual(value, 1.0)
        state = engine.get_state()
        self.assertEqual(state["dominant_traits"], ["openness", "agreeableness"])
        self.assertIn(state["clock"]["phase"], ("morning", "early_morning"))

    def test_cycle_report_sections(self) -> None:
        report = StateEngine().cycle_report()
        for key in ("cycle", "fertility", "pmdd", "phase_profile", "hpa", "dysregulation", "chronodisruption"):
            self.assertIn(key, report)
        self.assertEqual(report["chronodisruption"]["severity"], "insufficient_data")

    def test_reset_clears_history(self) -> None:
        engine = StateEngine()
        asyncio.run(engine.tick(Trigger(elapsed_ms=HOUR_MS, user_text="thank you, I love this, so glad")))
        with self.assertLogs("somatic.engine", level="INFO"):
            engine.reset()
        self.assertEqual(engine.snapshot().tick_count, 0)
        self.assertEqual(engine.memories(), [])


class StateEngineSerializationTests(unittest.TestCase):
    def _engine_with_history(self) -> StateEngine:
        engine = StateEngine(initial_cycle_day=12, chronotype="owl")
        for text in ("thank you, I love this", "I am worried and tired", None):
            asyncio.run(engine.tick(Trigger(elapsed_ms=2 * HOUR_MS, user_text=text)))
        return engine

    def test_json_round_trip_continues_identically(self) -> None:
        engine = self._engine_with_history()
        bundle = json.loads(json.dumps(engine.serialize()))
        restored = StateEngine.deserialize(bundle)
        self.assertEqual(json.dumps(restored.serialize(), sort_keys=True), json.dumps(engine.serialize(), sort_keys=True))
        trigger = Trigger(elapsed_ms=3 * HOUR_MS, user_text="a calm evening")
        original_next = asyncio.run(engine.tick(trigger))
        restored_next = asyncio.run(restored.tick(trigger))
        self.assertEqual(restored_next.as_dict(), original_next.as_dict())

    def test_unsupported_version_is_rejected(self) -> None:
        bundle = StateEngine().serialize()
        bundle["version"] = 99
        with self.assertRaises(StateRestoreError):
            StateEngine.deserialize(bundle)

    def test_restore_or_fresh_falls_back_on_malformed_records(self) -> None:
        with self.assertLogs("somatic.engine", level="WARNING"):
            engine = StateEngine.restore_or_fresh({}, initial_cycle_day=5)
        self.assertEqual(engine.snapshot().tick_count, 0)
        self.assertEqual(engine.snapshot().cycle.cycle_day, 5)
        self.assertEqual(StateEngine.restore_or_fresh(None).snapshot().tick_count, 0)

    def test_wrong_value_types_are_rejected(self) -> None:
        engine = self._engine_with_history()
        asyncio.run(engine.record_trauma("the accident", 0.6))
        corruptions = [
            (("hpa", "crh"), "not-a-number"),
            (("cycle", "estradiol"), "oops"),
            (("snapshot", "neuro", "dopamine"), "high"),
            (("snapshot", "intimate", "response_phase"), 1),
            (("snapshot", "tick_count"), "3"),
            (("memory", "records", 0, "salience"), "vivid"),
            (("clock", "asleep"), "false"),
            (("settings", "memory_capacity"), "lots"),
            (("personality", "traits", "openness"), None),
        ]
        for path, value in corruptions:
            bundle = json.loads(json.dumps(engine.serialize()))
            target = bundle
            for key in path[:-1]:
                target = target[key]
            target[path[-1]] = value
            with self.subTest(field=".".join(str(key) for key in path)):
                with self.assertRaises(StateRestoreError):
                    StateEngine.deserialize(bundle)

    def test_restore_or_fresh_falls_back_on_wrong_value_types(self) -> None:
        bundle = self._engine_with_history().serialize()
        bundle["hpa"]["crh"] = "not-a-number"
        with self.assertLogs("somatic.engine", level="WARNING"):
            engine = StateEngine.restore_or_fresh(bundle, initial_cycle_day=9)
        self.assertEqual(engine.snapshot().tick_count, 0)
        self.assertEqual(engine.snapshot().cycle.cycle_day, 9)

    def test_custom_personality_survives_restore_and_reset(self) -> None:
        custom = _FixedPersonality()
        engine = StateEngine(personality=custom)
        asyncio.run(engine.tick(Trigger(elapsed_ms=HOUR_MS)))
        bundle = json.loads(json.dumps(engine.serialize()))
        self.assertIsNone(bundle["personality"])
        restored = StateEngine.deserialize(bundle, personality=custom)
        self.assertIs(restored.personality, custom)
        self.assertEqual(restored.snapshot().as_dict(), engine.snapshot().as_dict())
        restored.reset()
        self.assertIsInstance(restored.personality, _FixedPersonality)
        with self.assertLogs("somatic.engine", level="WARNING"):
            fallback = StateEngine.restore_or_fresh({}, personality=custom)
        self.assertIs(fallback.personality, custom)
        self.assertIsInstance(StateEngine.deserialize(bundle).personality, Personality)


class CircadianClockTests(unittest.TestCase):
    def test_unknown_chronotype_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            CircadianClock(chronotype="night_shift")

    def test_sleep_debt_accrues_only_when_kept_awake(self) -> None:
        clock = CircadianClock(start_hour=22.5)
        for _ in range(4):
            clock.record_activity()
            clock.advance(0.5)
        self.assertAlmostEqual(clock.sleep_debt, 1.5)
        clock.advance(4.0)
        self.assertTrue(clock.asleep)
        self.assertLess(clock.sleep_debt, 1.5)

    def test_daytime_hours_do_not_accrue_debt(self) -> None:
        clock = CircadianClock(chronotype="lark", start_hour=8.0)
        clock.advance(10.0)
        self.assertEqual(clock.sleep_debt, 0.0)
        self.assertAlmostEqual(clock.hour_of_day, 18.0)
        self.assertGreaterEqual(clock.ultradian_multiplier(), 0.75)
        self.assertLessEqual(clock.ultradian_multiplier(), 1.25)

    def test_round_trip_and_bad_chronotype(self) -> None:
        clock = CircadianClock(chronotype="owl", start_hour=3.0)
        clock.advance(30.0)
        restored = CircadianClock.deserialize(clock.serialize())
        self.assertEqual(restored.serialize(), clock.serialize())
        record = clock.serialize()
        record["chronotype"] = "vampire"
        with self.assertRaises(StateRestoreError):
            CircadianClock.deserialize(record)


class PersonalityTests(unittest.TestCase):
    def test_invalid_smoothing_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            integrate_traits(BigFiveTraits(), smoothing=1.5)
        with self.assertRaises(ValueError):
            Personality(smoothing=-0.1)

    def test_zero_smoothing_returns_target(self) -> None:
        target = BigFiveTraits(neuroticism=0.9)
        self.assertEqual(integrate_traits(target, previous=BigFiveTraits(), smoothing=0.0), target)

    def test_stress_drifts_neuroticism_upward(self) -> None:
        personality = Personality()
        snapshot = StateSnapshot()
        stressed = snapshot.evolve(
            neuro=snapshot.neuro.update(cortisol=1.0),
            meta=snapshot.meta.update(anxiety=1.0),
        )
        personality.update_from_biological_state(stressed)
        self.assertGreater(personality.get_state()["neuroticism"], 0.4)
        restored = Personality.deserialize(personality.serialize())
        self.assertEqual(restored.get_state(), personality.get_state())


class MoodClassificationTests(unittest.TestCase):
    def test_mood_precedence(self) -> None:
        snapshot = StateSnapshot()
        self.assertEqual(classify_mood(snapshot), "Focused")
        stressed = snapshot.evolve(neuro=snapshot.neuro.update(cortisol=0.8))
        self.assertEqual(classify_mood(stressed), "Stressed")
        angry = stressed.evolve(emotions=stressed.emotions.update(anger=0.9))
        self.assertEqual(classify_mood(angry), "Angry")
        volatile = snapshot.evolve(meta=snapshot.meta.update(loyalty_construct=0.3))
        self.assertEqual(classify_mood(volatile), "Volatile")
        calm = snapshot.evolve(meta=snapshot.meta.update(subroutine_integrity=0.5))
        self.assertEqual(classify_mood(calm), "Calm")


if __name__ == "__main__":
    unittest.main()
