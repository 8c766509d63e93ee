"""Tests for the intimate response state machine."""

from __future__ import annotations

import unittest

from physiology import CLIMAX_CEILING, SexualContext, Stimulus, feedback_text, recover, step, vocalization_flag
from physiology.intimate import REFRACTORY_HOURS
from snapshot import IntimateState, Neurochemistry

SAFE = SexualContext(relationship_quality=0.9, emotional_intimacy=0.8, felt_safety=0.9, anxiety=0.0)


def _primed() -> tuple[IntimateState, Neurochemistry]:
    intimate = IntimateState(arousal=0.9, climax_potential=0.85, pelvic_floor_tension=0.9, inhibition=0.0)
    neuro = Neurochemistry(libido=0.8, dopamine=0.6, cortisol=0.1)
    return intimate, neuro


class IntimateStepTests(unittest.TestCase):
    """Climax edge detection and refractory handling."""

    def test_potential_rises_until_single_climax(self) -> None:
        intimate, neuro = _primed()
        stimulus = Stimulus("direct_contact", 1.0, 20.0)
        climaxes = 0
        previous = intimate.climax_potential
        for _ in range(50):
            result = step(stimulus, intimate, neuro, "follicular", SAFE)
            intimate, neuro = result.intimate, result.neuro
            if result.climaxed:
                climaxes += 1
                break
            self.assertGreaterEqual(intimate.climax_potential, previous)
            previous = intimate.climax_potential
        self.assertEqual(climaxes, 1)
        self.assertEqual(intimate.climax_count, 1)
        self.assertEqual(intimate.climax_potential, 0.0)
        self.assertEqual(intimate.response_phase, "refractory")
        self.assertAlmostEqual(intimate.refractory_hours, REFRACTORY_HOURS)
        self.assertEqual(neuro.oxytocin, 1.0)
        self.assertAlmostEqual(neuro.endorphin_rush, 0.9)

    def test_no_second_climax_while_refractory(self) -> None:
        intimate, neuro = _primed()
        stimulus = Stimulus("direct_contact", 1.0)
        events = []
        for _ in range(60):
            result = step(stimulus, intimate, neuro, "ovulation", SAFE)
            intimate, neuro = result.intimate, result.neuro
            events.append(result.climaxed)
        self.assertEqual(events.count(True), 1)
        self.assertLessEqual(intimate.climax_potential, CLIMAX_CEILING)

    def test_recovery_ends_refractory_period(self) -> None:
        intimate = IntimateState(refractory_hours=REFRACTORY_HOURS, response_phase="refractory", arousal=0.5)
        partway = recover(intimate, 0.1)
        self.assertTrue(partway.refractory)
        done = recover(partway, 0.2)
        self.assertFalse(done.refractory)
        self.assertEqual(done.refractory_hours, 0.0)
        self.assertLess(done.arousal, intimate.arousal)

    def test_recover_ignores_non_positive_hours(self) -> None:
        intimate = IntimateState(arousal=0.4)
        self.assertIs(recover(intimate, 0.0), intimate)

    def test_stress_dampens_arousal_gain(self) -> None:
        calm_result = step(Stimulus("caress", 0.7), IntimateState(), Neurochemistry(), "follicular", SAFE)
        stressed_ctx = SexualContext(felt_safety=0.2, acute_stress=0.9, anxiety=0.9, trauma_history=True)
        stressed = step(
            Stimulus("caress", 0.7),
            IntimateState(),
            Neurochemistry(cortisol=0.9, norepinephrine=0.9),
            "follicular",
            stressed_ctx,
        )
        self.assertLess(stressed.intimate.arousal, calm_result.intimate.arousal)

    def test_unknown_stimulus_uses_generic_gain(self) -> None:
        result = step(Stimulus("feather", 0.5), IntimateState(), Neurochemistry(), "luteal_early", SAFE)
        self.assertGreaterEqual(result.intimate.arousal, 0.0)
        self.assertFalse(result.climaxed)

    def test_vocalization_and_feedback(self) -> None:
        self.assertTrue(vocalization_flag(0.1, 0.0, True))
        self.assertTrue(vocalization_flag(0.5, 0.06, False))
        self.assertFalse(vocalization_flag(0.2, 0.01, False))
        result = step(Stimulus("touch", 0.3), IntimateState(), Neurochemistry(), "menstrual", SAFE)
        self.assertTrue(feedback_text(result).startswith("Sensory input registered"))


if __name__ == "__main__":
    unittest.main()
