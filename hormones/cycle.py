"""Hormonal cycle model: gonadotropins, ovarian hormones, follicles, corpus luteum.

The model integrates coupled difference equations in one-hour steps. Variable
choices (cycle length, ovulatory cycles, follicle cohorts) come from a
``ChaosSource`` keyed by label and cycle day, so replay is exact.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Mapping

from snapshot import EmotionState, StateSnapshot
from utils.numeric import clamp
from utils.serialization import StateRestoreError, coerce_fields

from .chaos import ChaosSource
from .homeostasis import baseline_for

logger = logging.getLogger("somatic.cycle")

FSH_THRESHOLD = 0.3
LH_SURGE_THRESHOLD = 0.7
FOLLICLE_GROWTH_RATE = 1.5  # mm/day
CORPUS_LUTEUM_LIFESPAN = 14.0  # days
DOMINANCE_SIZE = 10.0  # mm
SURGE_FOLLICLE_SIZE = 18.0  # mm
MAX_FOLLICLE_SIZE = 30.0  # mm
LH_SURGE_HOURS = 48
MIN_CYCLE_LENGTH = 21
MAX_CYCLE_LENGTH = 35

# Per-hour first-order clearance.
ESTRADIOL_CLEARANCE = 0.05
PROGESTERONE_CLEARANCE = 0.03
TESTOSTERONE_CLEARANCE = 0.03

PHASE_DAY_RANGES: dict[str, tuple[int, int]] = {
    "menstrual": (1, 5),
    "follicular": (6, 13),
    "ovulation": (14, 16),
    "luteal_early": (17, 21),
    "luteal_late": (22, 28),
}

_LUTEAL = ("luteal_early", "luteal_late")
_PMDD_SYMPTOMS: dict[str, tuple[float, float]] = {
    "irritability": (0.3, 0.6),
    "depressed_mood": (0.2, 0.5),
    "anxiety": (0.25, 0.55),
    "affective_lability": (0.3, 0.5),
    "anhedonia": (0.15, 0.4),
    "fatigue": (0.4, 0.4),
    "food_cravings": (0.2, 0.5),
    "sleep_disturbance": (0.25, 0.45),
}
_PMDD_CORE = ("irritability", "depressed_mood", "anxiety", "affective_lability")


def ovarian_reserve_for_age(age: float) -> float:
    if age < 25:
        reserve = 0.9 + (age - 20) * 0.02
    elif age <= 30:
        reserve = 1.0 - (age - 25) * 0.02
    elif age <= 35:
        reserve = 0.9 - (age - 30) * 0.06
    elif age <= 40:
        reserve = 0.6 - (age - 35) * 0.08
    else:
        reserve = max(0.1, 0.2 - (age - 40) * 0.02)
    return clamp(reserve)


def baseline_fsh_for_age(age: float) -> float:
    if age < 35:
        return clamp(0.15 + (age - 25) * 0.005)
    return clamp(0.2 + (age - 35) * 0.02)


@dataclass(slots=True)
class Follicle:
    """Single ovarian follicle; ``dominance`` scales its recruitment rate."""

    size: float
    maturity: float
    dominance: float
    atretic: bool = False
    dominant: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Follicle":
        return cls(**coerce_fields(cls, data))


@dataclass(slots=True)
class CycleState:
    fsh: float = 0.4
    lh: float = 0.1
    lh_surge_active: bool = False
    lh_surge_hours: int = 0
    estradiol: float = 0.1
    progesterone: float = 0.05
    testosterone: float = 0.3
    androstenedione: float = 0.25
    inhibin_a: float = 0.05
    inhibin_b: float = 0.2
    activin: float = 0.3
    amh: float = 0.8
    follicles: list[Follicle] = field(default_factory=list)
    corpus_luteum_age: float = 0.0
    luteolysis_complete: bool = False
    endometrial_thickness: float = 2.0
    endometrial_phase: str = "menstrual"
    cycle_day: int = 1
    cycle_length: int = 28
    ovulation_day: int = 0
    is_ovulatory: bool = True
    baseline_fsh: float = 0.15
    ovarian_reserve: float = 1.0
    cycle_regularity: float = 0.8
    hour_of_cycle: int = 0
    cycle_number: int = 0
    age: float = 25.0
    stress_level: float = 0.0
    pending_hours: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "CycleState":
        values = coerce_fields(cls, data)
        if not isinstance(values["follicles"], list):
            raise StateRestoreError("CycleState.follicles must be a list")
        values["follicles"] = [Follicle.from_dict(item) for item in values["follicles"]]
        return cls(**values)


class HormonalCycle:
    """Simulates a 21-35 day reproductive hormonal cycle in hour-sized steps."""

    def __init__(
        self,
        *,
        age: float = 25.0,
        start_day: int = 1,
        chaos: ChaosSource | None = None,
    ) -> None:
        self._chaos = chaos or ChaosSource()
        age = clamp(float(age), 13.0, 55.0)
        reserve = ovarian_reserve_for_age(age)
        self._state = CycleState(
            age=age,
            ovarian_reserve=reserve,
            baseline_fsh=baseline_fsh_for_age(age),
            amh=reserve * 0.8,
        )
        self._state.cycle_length = self._draw_cycle_length()
        self._state.is_ovulatory = self._draw_ovulatory("ovulatory_init")
        self._state.follicles = self._recruit_follicles()
        start_day = int(clamp(start_day, 1, self._state.cycle_length))
        if start_day > 5:
            for _ in range(start_day - 1):
                self.advance(24.0)
        elif start_day > 1:
            self._state.hour_of_cycle = (start_day - 1) * 24
            self._state.cycle_day = start_day

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------
    @property
    def state(self) -> CycleState:
        """Return a copy of the internal state."""
        return copy.deepcopy(self._state)

    @property
    def cycle_day(self) -> int:
        return self._state.cycle_day

    def dominant_follicle(self) -> Follicle | None:
        for follicle in self._state.follicles:
            if follicle.dominant and not follicle.atretic:
                return follicle
        return None

    def current_phase(self) -> str:
        s = self._state
        if s.cycle_day <= 5:
            return "menstrual"
        if s.ovulation_day > 0:
            if s.cycle_day - s.ovulation_day <= 1:
                return "ovulation"
            if s.luteolysis_complete or s.corpus_luteum_age > 7:
                return "luteal_late"
            return "luteal_early"
        if s.lh_surge_active:
            return "ovulation"
        return "follicular"

    def get_state(self) -> dict[str, Any]:
        s = self._state
        dominant = self.dominant_follicle()
        return {
            "cycle_day": s.cycle_day,
            "cycle_phase": self.current_phase(),
            "cycle_length": s.cycle_length,
            "ovulation_day": s.ovulation_day,
            "is_ovulatory": s.is_ovulatory,
            "fsh": s.fsh,
            "lh": s.lh,
            "lh_surge_active": s.lh_surge_active,
            "estradiol": s.estradiol,
            "progesterone": s.progesterone,
            "testosterone": s.testosterone,
            "androstenedione": s.androstenedione,
            "inhibin_a": s.inhibin_a,
            "inhibin_b": s.inhibin_b,
            "activin": s.activin,
            "amh": s.amh,
            "follicle_count": len(s.follicles),
            "dominant_follicle_size": dominant.size if dominant else None,
            "corpus_luteum_age": s.corpus_luteum_age,
            "endometrial_thickness": s.endometrial_thickness,
            "endometrial_phase": s.endometrial_phase,
        }

    # ------------------------------------------------------------------
    # Integration
    # ------------------------------------------------------------------
    def advance(self, hours: float) -> None:
        """Advance by ``hours``; fractional remainders carry into the next call."""
        if hours <= 0:
            return
        total = self._state.pending_hours + float(hours)
        steps = int(total)
        self._state.pending_hours = total - steps
        for _ in range(steps):
            self._step_hour()

    def _step_hour(self) -> None:
        s = self._state
        s.hour_of_cycle += 1
        s.cycle_day = min(s.hour_of_cycle // 24 + 1, s.cycle_length)
        self._update_follicles()
        self._update_hpg_axis()
        self._check_surge_trigger()
        self._update_corpus_luteum()
        self._update_endometrium()
        if s.hour_of_cycle >= s.cycle_length * 24:
            self._start_new_cycle()

    def _update_follicles(self) -> None:
        s = self._state
        fsh_effect = 1.0 if s.fsh > FSH_THRESHOLD else 0.3
        hourly_rate = FOLLICLE_GROWTH_RATE / 24.0
        base_growth = hourly_rate * fsh_effect * (1.0 - s.inhibin_b * 0.5)
        for follicle in s.follicles:
            if follicle.atretic:
                follicle.size -= hourly_rate * 0.5
                continue
            recruitment = 0.5 + follicle.dominance
            follicle.size = min(MAX_FOLLICLE_SIZE, follicle.size + base_growth * recruitment)
            follicle.maturity = min(1.0, follicle.maturity + 0.001 * fsh_effect * recruitment)
        if self.dominant_follicle() is None:
            for index, follicle in enumerate(s.follicles):
                if not follicle.atretic and follicle.size > DOMINANCE_SIZE:
                    follicle.dominant = True
                    follicle.dominance = 1.0
                    for other_index, other in enumerate(s.follicles):
                        if other_index != index:
                            other.atretic = True
                    logger.debug("Follicle selected as dominant on day %s (%.1f mm)", s.cycle_day, follicle.size)
                    break
        s.follicles = [f for f in s.follicles if not (f.atretic and f.size <= 0.0)]

    def _update_hpg_axis(self) -> None:
        s = self._state
        dt = 1.0 / 24.0
        luteal = self.current_phase() in _LUTEAL
        frequency = 1.0 / 4.0 if luteal else 1.0 / 1.5
        pulse = 1.0 if math.sin(s.hour_of_cycle * frequency * 2.0 * math.pi) > 0.5 else 0.0

        inhibition = s.inhibin_b * 0.4 + s.estradiol * 0.2
        s.fsh += dt * (
            pulse * 0.3 * (1.0 + s.activin * 0.5) * (1.0 - inhibition)
            + s.baseline_fsh * 0.1
            - s.fsh * 0.1
        )

        if s.lh_surge_active:
            s.lh = 0.9 * math.exp(-s.lh_surge_hours / 36.0)
            s.lh_surge_hours += 1
            if s.lh_surge_hours > LH_SURGE_HOURS:
                s.lh_surge_active = False
                self._ovulate()
        else:
            s.lh += dt * (pulse * 0.2 * (1.0 - s.progesterone * 0.6) - s.lh * 0.15)

        dominant = self.dominant_follicle()
        if dominant is not None:
            e2_production = dominant.size / 20.0 * 0.8 + s.testosterone * 0.2 * s.fsh
        else:
            e2_production = len([f for f in s.follicles if not f.atretic]) * 0.01
        cl_age = s.corpus_luteum_age
        if 0.0 < cl_age < CORPUS_LUTEUM_LIFESPAN:
            e2_production += 0.3 * (1.0 - cl_age / CORPUS_LUTEUM_LIFESPAN)
        s.estradiol += dt * e2_production - ESTRADIOL_CLEARANCE * s.estradiol

        if cl_age > 0.0:
            if cl_age < 7.0:
                p4_production = 0.6 * cl_age / 7.0
            elif cl_age < 11.0:
                p4_production = 0.8
            else:
                p4_production = 0.8 * math.exp(-(cl_age - 11.0) / 3.0)
        else:
            p4_production = 0.02
        s.progesterone += dt * p4_production - PROGESTERONE_CLEARANCE * s.progesterone

        s.testosterone += (
            dt * s.lh * 0.3 * (1.0 + s.ovarian_reserve * 0.5)
            - TESTOSTERONE_CLEARANCE * s.testosterone
        )
        s.androstenedione = s.testosterone * 0.8

        s.inhibin_b = dominant.maturity if dominant is not None else s.inhibin_b * 0.95
        s.inhibin_a = s.progesterone * 0.8 if cl_age > 0.0 else s.inhibin_a * 0.9
        s.activin = 1.0 - (s.inhibin_a + s.inhibin_b) * 0.5
        s.amh = s.ovarian_reserve * 0.8 + self._chaos.value("amh_noise", s.cycle_day) * 0.05

        for name in (
            "fsh",
            "lh",
            "estradiol",
            "progesterone",
            "testosterone",
            "androstenedione",
            "inhibin_a",
            "inhibin_b",
            "activin",
            "amh",
        ):
            setattr(s, name, clamp(getattr(s, name)))

    def _check_surge_trigger(self) -> None:
        s = self._state
        if not s.is_ovulatory or s.ovulation_day > 0 or s.lh_surge_active:
            return
        dominant = self.dominant_follicle()
        if s.estradiol > LH_SURGE_THRESHOLD and dominant is not None and dominant.size > SURGE_FOLLICLE_SIZE:
            s.lh_surge_active = True
            s.lh_surge_hours = 0
            s.lh = 0.9
            logger.debug("LH surge started on day %s", s.cycle_day)

    def _ovulate(self) -> None:
        s = self._state
        s.ovulation_day = s.cycle_day
        s.corpus_luteum_age = 0.01
        s.follicles = []
        s.estradiol *= 0.5
        s.lh *= 0.2
        logger.debug("Ovulation on cycle day %s", s.cycle_day)

    def _update_corpus_luteum(self) -> None:
        s = self._state
        if s.corpus_luteum_age <= 0.0:
            return
        s.corpus_luteum_age += 1.0 / 24.0
        if s.corpus_luteum_age > CORPUS_LUTEUM_LIFESPAN:
            s.corpus_luteum_age = 0.0
            s.luteolysis_complete = True
            s.endometrial_phase = "menstrual"

    def _update_endometrium(self) -> None:
        s = self._state
        phase = self.current_phase()
        if phase == "menstrual" or s.luteolysis_complete:
            s.endometrial_phase = "menstrual"
            s.endometrial_thickness = max(2.0, s.endometrial_thickness - 0.02)
        elif phase in _LUTEAL:
            s.endometrial_phase = "secretory"
            s.endometrial_thickness = min(16.0, s.endometrial_thickness + 0.01)
        else:
            s.endometrial_phase = "proliferative"
            s.endometrial_thickness = min(14.0, s.endometrial_thickness + s.estradiol * 0.3 / 24.0)

    def _start_new_cycle(self) -> None:
        s = self._state
        s.cycle_number += 1
        s.hour_of_cycle = 0
        s.cycle_day = 1
        s.cycle_length = self._draw_cycle_length()
        s.is_ovulatory = self._draw_ovulatory("ovulatory_reset")
        s.ovulation_day = 0
        s.follicles = self._recruit_follicles()
        s.lh_surge_active = False
        s.lh_surge_hours = 0
        s.corpus_luteum_age = 0.0
        s.luteolysis_complete = False
        s.fsh = 0.4
        s.endometrial_phase = "menstrual"
        logger.debug(
            "Cycle %s started: length=%s ovulatory=%s", s.cycle_number, s.cycle_length, s.is_ovulatory
        )

    # ------------------------------------------------------------------
    # Deterministic draws
    # ------------------------------------------------------------------
    def _label(self, name: str) -> str:
        return f"{name}:{self._state.cycle_number}"

    def _draw_cycle_length(self) -> int:
        sample = self._chaos.normal(self._label("cycle_length"), self._state.cycle_day, 28.0, 3.0)
        return int(clamp(round(sample), MIN_CYCLE_LENGTH, MAX_CYCLE_LENGTH))

    def _draw_ovulatory(self, name: str) -> bool:
        probability = clamp(0.5 + (self._state.ovarian_reserve - 0.5) * 0.6, 0.4, 0.98)
        return self._chaos.bernoulli(self._label(name), self._state.cycle_day, probability)

    def _recruit_follicles(self) -> list[Follicle]:
        day = self._state.cycle_day
        count = 10 + int(math.floor(self._chaos.value(self._label("follicle_count"), day) * 10))
        return [
            Follicle(
                size=2.0 + self._chaos.value(self._label(f"follicle_{i}"), day) * 3.0,
                maturity=self._chaos.value(self._label(f"follicle_maturity_{i}"), day) * 0.3,
                dominance=self._chaos.value(self._label(f"follicle_dom_{i}"), day) * 0.2,
            )
            for i in range(count)
        ]

    # ------------------------------------------------------------------
    # Coupling entry points
    # ------------------------------------------------------------------
    def apply_stress(self, level: float) -> None:
        """Suppress gonadotropins when stress first exceeds the severe threshold."""
        s = self._state
        level = clamp(level)
        crossed = level > 0.7 >= s.stress_level
        s.stress_level = level
        if not crossed:
            return
        s.fsh = clamp(s.fsh * (1.0 - level * 0.3))
        s.lh = clamp(s.lh * (1.0 - level * 0.4))
        if s.ovulation_day == 0 and s.is_ovulatory:
            s.is_ovulatory = False
            logger.debug("Severe stress (%.2f) made cycle %s anovulatory", level, s.cycle_number)

    def integrate_hpa_axis(self, cortisol: float, crh: float, weight: float = 1.0) -> None:
        """Apply stress-axis suppression of the gonadotropins."""
        s = self._state
        weight = clamp(weight)
        crh_drive = max(0.0, clamp(crh) - 0.1)
        s.fsh = clamp(s.fsh * (1.0 - crh_drive * 0.45 * weight))
        s.lh = clamp(s.lh * (1.0 - crh_drive * 0.54 * weight))
        if clamp(cortisol) > 0.7:
            if s.corpus_luteum_age > 0.0:
                s.corpus_luteum_age += 0.15 * weight
            if s.ovulation_day == 0 and s.is_ovulatory:
                s.is_ovulatory = self._chaos.value(self._label("hpa_suppression"), s.cycle_day) < 0.7

    def set_age(self, age: float) -> None:
        s = self._state
        s.age = clamp(float(age), 13.0, 55.0)
        s.baseline_fsh = baseline_fsh_for_age(s.age)
        s.ovarian_reserve = ovarian_reserve_for_age(s.age)

    # ------------------------------------------------------------------
    # Snapshot modulation
    # ------------------------------------------------------------------
    def allopregnanolone_proxy(self) -> float:
        s = self._state
        vulnerability = min(1.0, max(0.0, (s.corpus_luteum_age - 7.0) / 7.0))
        if s.luteolysis_complete:
            vulnerability = 1.0
        return s.progesterone * (1.0 + vulnerability)

    def modulate(self, snapshot: StateSnapshot, weight: float = 1.0) -> StateSnapshot:
        """Copy cycle hormones into ``snapshot`` and apply phase effects.

        Neurochemical effects are nudges toward baseline-relative targets,
        scaled by ``weight`` so repeated ticks do not compound.
        """
        s = self._state
        phase = self.current_phase()
        weight = clamp(weight)
        e2, p4, t = s.estradiol, s.progesterone, s.testosterone
        late = phase == "luteal_late"

        neuro = snapshot.neuro
        targets = {
            "serotonin": baseline_for("neuro", "serotonin") * (1.0 + e2 * 0.35),
            "dopamine": baseline_for("neuro", "dopamine") * (1.0 + e2 * 0.25),
            "gaba": baseline_for("neuro", "gaba") * (1.0 + p4 * 0.4),
            "libido": baseline_for("neuro", "libido")
            * max(0.2, 1.0 + e2 * 1.5 - p4 * 0.8 + t * 2.0 + (0.6 if s.lh_surge_active else 0.0)),
        }
        if phase == "menstrual" or late:
            targets["cortisol"] = baseline_for("neuro", "cortisol") + 0.15
        nudged = {name: getattr(neuro, name) + (target - getattr(neuro, name)) * weight for name, target in targets.items()}
        neuro = neuro.update(
            fsh=s.fsh,
            lh=s.lh,
            estradiol=e2,
            progesterone=p4,
            testosterone=t,
            **nudged,
        )

        meta = snapshot.meta
        discomfort = 0.0
        energy_target = baseline_for("meta", "energy")
        anxiety_target = meta.anxiety
        if phase == "menstrual":
            discomfort += 0.55
            energy_target *= 0.65
        if late and s.corpus_luteum_age > 10.0:
            discomfort += p4 * 0.35
            energy_target *= 1.0 - p4 * 0.35
        if late and p4 > 0.6:
            anxiety_target = baseline_for("meta", "anxiety") + 0.3
        meta = meta.update(
            physical_discomfort=discomfort,
            emotional_volatility=0.35 if late and p4 > 0.6 else 0.0,
            vigilance=0.25 if late else 0.0,
            irritability=0.3 + self.allopregnanolone_proxy() * 0.4 if late else 0.0,
            cognitive_performance=0.7 * (1.0 + e2 * 0.25),
            energy=meta.energy + (energy_target - meta.energy) * weight,
            anxiety=meta.anxiety + (anxiety_target - meta.anxiety) * weight,
        )

        cycle = snapshot.cycle.update(
            cycle_day=s.cycle_day,
            cycle_phase=phase,
            cycle_length=s.cycle_length,
            ovulation_day=s.ovulation_day,
        )
        emotions = self.modulate_emotions(snapshot.emotions)
        return replace(snapshot, neuro=neuro, meta=meta, cycle=cycle, emotions=emotions)

    def modulate_emotions(self, emotions: EmotionState) -> EmotionState:
        """Apply the phase-specific emotion overlay."""
        s = self._state
        phase = self.current_phase()
        e2, t, p4 = s.estradiol, s.testosterone, s.progesterone
        if phase == "menstrual":
            return emotions.shift(sadness=0.15, discomfort=0.2, shyness=0.1)
        if phase == "follicular":
            return emotions.scale(
                happiness=1.0 + e2 * 0.4,
                pride=1.0 + t * 0.3,
                love=1.0 + e2 * 0.2,
                sadness=1.0 - e2 * 0.25,
                fear=1.0 - e2 * 0.2,
            )
        if phase == "ovulation":
            boost = 1.5 if s.lh > 0.5 else 1.2
            return emotions.scale(
                happiness=1.0 + e2 * 0.5 * boost,
                pride=1.0 + t * 0.6 * boost,
                love=1.0 + e2 * 0.35,
                envy=0.8,
                resentment=0.7,
                anger=0.85,
            )
        if phase == "luteal_early":
            return emotions.shift(relief=0.15, calm=p4 * 0.25)
        allo = self.allopregnanolone_proxy()
        return emotions.scale(
            sadness=1.0 + allo * 0.35,
            fear=1.0 + allo * 0.3,
            shame=1.0 + allo * 0.25,
            guilt=1.0 + allo * 0.3,
            happiness=1.0 - allo * 0.35,
            love=1.0 - allo * 0.2,
        )

    # ------------------------------------------------------------------
    # Assessments
    # ------------------------------------------------------------------
    def pmdd_assessment(self) -> dict[str, Any]:
        allo = self.allopregnanolone_proxy()
        symptoms = {name: min(1.0, base + allo * gain) for name, (base, gain) in _PMDD_SYMPTOMS.items()}
        moderate = [name for name, score in symptoms.items() if score >= 0.5]
        has_core = any(name in moderate for name in _PMDD_CORE)
        has_pmdd = self.current_phase() == "luteal_late" and len(moderate) >= 5 and has_core
        score = 0.0
        if has_pmdd:
            average = sum(symptoms.values()) / len(symptoms)
            score = min(100.0, average * 100.0 + len(moderate) * 10.0)
        if score >= 60.0:
            severity = "severe"
        elif score >= 30.0:
            severity = "moderate"
        elif score > 0.0:
            severity = "mild"
        else:
            severity = "none"
        return {"has_pmdd": has_pmdd, "score": round(score, 2), "severity": severity, "symptoms": symptoms}

    def fertility_status(self) -> dict[str, Any]:
        s = self._state
        phase = self.current_phase()
        dominant = self.dominant_follicle()
        if s.ovulation_day > 0:
            fertile = s.cycle_day - s.ovulation_day <= 1
            return {
                "fertile": fertile,
                "score": 0.5 if fertile else 0.0,
                "days_until_ovulation": None,
                "phase": phase,
            }
        if dominant is not None and dominant.size > 16.0:
            return {
                "fertile": True,
                "score": min(1.0, dominant.size / 20.0),
                "days_until_ovulation": max(0.0, (20.0 - dominant.size) / 1.5),
                "phase": phase,
            }
        fertile = phase == "follicular" and s.cycle_day > 8
        return {
            "fertile": fertile,
            "score": 0.3 if fertile else 0.0,
            "days_until_ovulation": max(0, 14 - s.cycle_day),
            "phase": phase,
        }

    @staticmethod
    def phase_profile() -> dict[str, tuple[int, int]]:
        """Typical day ranges of each phase in a 28-day cycle."""
        return dict(PHASE_DAY_RANGES)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def serialize(self) -> dict[str, Any]:
        return self._state.as_dict()

    @classmethod
    def deserialize(cls, record: Mapping[str, Any], *, chaos: ChaosSource | None = None) -> "HormonalCycle":
        state = CycleState.from_dict(record)
        cycle = cls.__new__(cls)
        cycle._chaos = chaos or ChaosSource()
        cycle._state = state
        return cycle


__all__ = [
    "CORPUS_LUTEUM_LIFESPAN",
    "CycleState",
    "Follicle",
    "HormonalCycle",
    "PHASE_DAY_RANGES",
    "baseline_fsh_for_age",
    "ovarian_reserve_for_age",
]
