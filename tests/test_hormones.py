"""Unit tests for the hormonal cycle, the HPA axis, and homeostasis."""

from __future__ import annotations

import math
import unittest

from hormones import ChaosSource, HormonalCycle, HPAAxis, classify_band, decay_toward_baseline, logistic_chaos
from hormones.homeostasis import BASELINES, endocrine_trace
from hormones.hpa import CORTISOL_FREE_BASE
from snapshot import CYCLE_PHASES, StateSnapshot
from utils.serialization import StateRestoreError


class ChaosSourceTests(unittest.TestCase):
    """Deterministic pseudo-random draws."""

    def test_logistic_chaos_is_deterministic_and_bounded(self) -> None:
        for day in range(1, 40):
            with self.subTest(day=day):
                value = logistic_chaos("cycle_length:0", day)
                self.assertEqual(value, logistic_chaos("cycle_length:0", day))
                self.assertGreaterEqual(value, 0.0)
                self.assertLessEqual(value, 1.0)

    def test_injected_function_is_used(self) -> None:
        chaos = ChaosSource(lambda label, day: 0.25)
        self.assertEqual(chaos.value("anything", 3), 0.25)
        self.assertTrue(chaos.bernoulli("anything", 3, 0.5))
        self.assertFalse(chaos.bernoulli("anything", 3, 0.1))


class HormonalCycleTests(unittest.TestCase):
    """Validate cycle progression, coupling hooks, and serialization."""

    def test_full_cycle_returns_to_day_one(self) -> None:
        cycle = HormonalCycle()
        length = cycle.state.cycle_length
        cycle.advance(length * 24.0)
        state = cycle.state
        self.assertEqual(state.cycle_day, 1)
        self.assertEqual(state.ovulation_day, 0)
        self.assertEqual(state.cycle_number, 1)

    def test_hormones_and_phases_stay_valid(self) -> None:
        cycle = HormonalCycle()
        for _ in range(35 * 4):
            cycle.advance(6.0)
            state = cycle.state
            self.assertIn(cycle.current_phase(), CYCLE_PHASES)
            for name in ("fsh", "lh", "estradiol", "progesterone", "testosterone"):
                with self.subTest(name=name, hour=state.hour_of_cycle):
                    self.assertGreaterEqual(getattr(state, name), 0.0)
                    self.assertLessEqual(getattr(state, name), 1.0)

    def test_fractional_hours_carry_over(self) -> None:
        sliced = HormonalCycle()
        for _ in range(48):
            sliced.advance(0.5)
        whole = HormonalCycle()
        whole.advance(24.0)
        self.assertEqual(sliced.state.hour_of_cycle, whole.state.hour_of_cycle)
        self.assertAlmostEqual(sliced.state.estradiol, whole.state.estradiol)

    def test_identical_inputs_give_identical_trajectories(self) -> None:
        first, second = HormonalCycle(age=31.0), HormonalCycle(age=31.0)
        first.advance(500.0)
        second.advance(500.0)
        self.assertEqual(first.serialize(), second.serialize())

    def test_serialize_round_trip_continues_identically(self) -> None:
        cycle = HormonalCycle()
        cycle.advance(200.0)
        restored = HormonalCycle.deserialize(cycle.serialize())
        self.assertEqual(restored.serialize(), cycle.serialize())
        cycle.advance(100.0)
        restored.advance(100.0)
        self.assertEqual(restored.serialize(), cycle.serialize())

    def test_deserialize_rejects_missing_keys(self) -> None:
        record = HormonalCycle().serialize()
        del record["estradiol"]
        with self.assertRaises(StateRestoreError):
            HormonalCycle.deserialize(record)

    def test_deserialize_rejects_wrong_value_types(self) -> None:
        for name, value in (
            ("estradiol", "oops"),
            ("cycle_day", 1.5),
            ("lh_surge_active", "yes"),
            ("endometrial_phase", 3),
            ("follicles", "none"),
        ):
            record = HormonalCycle().serialize()
            record[name] = value
            with self.subTest(field=name):
                with self.assertRaises(StateRestoreError):
                    HormonalCycle.deserialize(record)

    def test_deserialize_accepts_integral_floats_for_counters(self) -> None:
        record = HormonalCycle().serialize()
        record["cycle_day"] = 4.0
        restored = HormonalCycle.deserialize(record)
        self.assertEqual(restored.serialize()["cycle_day"], 4)
        self.assertIsInstance(restored.serialize()["cycle_day"], int)

    def test_severe_stress_suppresses_gonadotropins_once(self) -> None:
        cycle = HormonalCycle()
        before = cycle.state.fsh
        cycle.apply_stress(0.9)
        after_first = cycle.state.fsh
        cycle.apply_stress(0.9)
        self.assertLess(after_first, before)
        self.assertEqual(cycle.state.fsh, after_first)

    def test_modulate_copies_cycle_metadata(self) -> None:
        cycle = HormonalCycle(start_day=10)
        snapshot = cycle.modulate(StateSnapshot(), weight=0.5)
        self.assertEqual(snapshot.cycle.cycle_day, cycle.cycle_day)
        self.assertEqual(snapshot.cycle.cycle_phase, cycle.current_phase())
        self.assertAlmostEqual(snapshot.neuro.estradiol, cycle.state.estradiol)

    def test_assessments_report_expected_keys(self) -> None:
        cycle = HormonalCycle()
        self.assertIn("fertile", cycle.fertility_status())
        pmdd = cycle.pmdd_assessment()
        self.assertIn(pmdd["severity"], ("none", "mild", "moderate", "severe"))
        self.assertFalse(pmdd["has_pmdd"])
        self.assertIn("menstrual", HormonalCycle.phase_profile())


class HPAAxisTests(unittest.TestCase):
    """Lagged stress response and recovery."""

    def test_zero_elapsed_changes_nothing(self) -> None:
        axis = HPAAxis()
        axis.apply_acute_stress(0.8)
        before = axis.serialize()
        axis.process_lags(0.0)
        axis.advance_recovery(0.0)
        self.assertEqual(axis.serialize(), before)

    def test_acute_stressor_releases_through_lags(self) -> None:
        axis = HPAAxis()
        axis.apply_acute_stress(0.8)
        self.assertAlmostEqual(axis.state.cortisol_free, CORTISOL_FREE_BASE)
        axis.process_lags(600.0)
        self.assertAlmostEqual(axis.state.cortisol_free - CORTISOL_FREE_BASE, 0.3504, places=3)
        axis.process_lags(24 * 3600.0)
        self.assertAlmostEqual(axis.state.cortisol_free - CORTISOL_FREE_BASE, 0.8 * 0.7 * 0.9, places=6)

    def test_lag_release_is_independent_of_slicing(self) -> None:
        sliced, whole = HPAAxis(), HPAAxis()
        sliced.apply_acute_stress(0.6)
        whole.apply_acute_stress(0.6)
        for _ in range(10):
            sliced.process_lags(60.0)
        whole.process_lags(600.0)
        self.assertAlmostEqual(sliced.state.cortisol_free, whole.state.cortisol_free)
        self.assertAlmostEqual(sliced.state.pituitary_to_terminal_lag, whole.state.pituitary_to_terminal_lag)
        self.assertAlmostEqual(sliced.state.releasing_to_pituitary_lag, whole.state.releasing_to_pituitary_lag)

    def test_lags_conserve_forwarded_amount(self) -> None:
        axis = HPAAxis()
        axis.apply_acute_stress(0.5)
        queued = axis.state.releasing_to_pituitary_lag
        axis.process_lags(300.0)
        state = axis.state
        delivered = state.cortisol_free - CORTISOL_FREE_BASE
        in_flight = state.releasing_to_pituitary_lag * 0.7 + state.pituitary_to_terminal_lag
        self.assertAlmostEqual(delivered + in_flight, queued * 0.7)

    def test_recovery_clears_acute_stress(self) -> None:
        axis = HPAAxis()
        axis.apply_acute_stress(0.8)
        axis.process_lags(600.0)
        axis.advance_recovery(6 * 3600.0)
        self.assertLess(axis.projection().acute_stress, 0.05)

    def test_projection_is_bounded(self) -> None:
        axis = HPAAxis()
        for _ in range(5):
            axis.apply_acute_stress(1.0, context={"fear": 1.0}, stress_type="social")
            axis.process_lags(120.0)
        for name, value, (low, high) in axis.projection().bounded_items():
            with self.subTest(name=name):
                self.assertGreaterEqual(value, low)
                self.assertLessEqual(value, high)

    def test_chronic_stress_flags_dysregulation(self) -> None:
        axis = HPAAxis()
        axis.apply_chronic_stress(0.9, 24 * 30.0)
        axis.update_circadian_phase(8.0)
        self.assertGreater(axis.projection().chronic_stress, 0.0)
        self.assertGreater(axis.dysregulation, 0.0)
        self.assertIn("flattened_rhythm", axis.dysregulation_indicators())

    def test_round_trip(self) -> None:
        axis = HPAAxis()
        axis.apply_acute_stress(0.4)
        axis.process_lags(90.0)
        restored = HPAAxis.deserialize(axis.serialize())
        self.assertEqual(restored.serialize(), axis.serialize())

    def test_deserialize_rejects_non_numeric_levels(self) -> None:
        for value in ("not-a-number", None, True, math.nan):
            record = HPAAxis().serialize()
            record["crh"] = value
            with self.subTest(value=value):
                with self.assertRaises(StateRestoreError):
                    HPAAxis.deserialize(record)


class HomeostasisTests(unittest.TestCase):
    def test_long_decay_reaches_baselines(self) -> None:
        snapshot = StateSnapshot()
        snapshot = snapshot.evolve(
            neuro=snapshot.neuro.update(dopamine=1.0, cortisol=1.0, serotonin=0.0),
            meta=snapshot.meta.update(anxiety=1.0, loyalty_construct=0.0),
        )
        decayed = decay_toward_baseline(snapshot, 1000.0)
        for section, baselines in BASELINES.items():
            for name, base in baselines.items():
                with self.subTest(field=f"{section}.{name}"):
                    self.assertAlmostEqual(getattr(getattr(decayed, section), name), base, delta=0.01)

    def test_non_positive_hours_are_no_ops(self) -> None:
        snapshot = StateSnapshot()
        self.assertIs(decay_toward_baseline(snapshot, 0.0), snapshot)
        self.assertIs(decay_toward_baseline(snapshot, -3.0), snapshot)

    def test_band_classification(self) -> None:
        cases = {0.2: "surging", 0.07: "rising", 0.0: "steady", -0.07: "fading", -0.2: "crashing"}
        for delta, band in cases.items():
            with self.subTest(delta=delta):
                self.assertEqual(classify_band(delta), band)

    def test_endocrine_trace_covers_baselines(self) -> None:
        trace = endocrine_trace(StateSnapshot())
        self.assertEqual(set(trace["bands"]), {name for values in BASELINES.values() for name in values})
        self.assertFalse(any(math.isnan(value) for value in trace["delta"].values()))


if __name__ == "__main__":
    unittest.main()
