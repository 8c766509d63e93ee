"""Simulated circadian clock: time of day, sleep/wake, sleep debt, ultradian rhythm."""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from bridges.phase_sync import circadian_phase_label, wrap_angle, zeitgeber_strength
from utils.serialization import StateRestoreError, coerce_value, require_keys

logger = logging.getLogger("somatic.clock")

STEP_HOURS = 0.25
ULTRADIAN_MINUTES = 90.0
ACTIVITY_WINDOW_HOURS = 1.0
SLEEP_RECOVERY_RATE = 0.5
ENTRAINMENT_RATE = 0.1


@dataclass(frozen=True)
class Chronotype:
    sleep_onset: float
    sleep_duration: float
    peak_alertness: float
    period_hours: float
    light_sensitivity: float


CHRONOTYPES: dict[str, Chronotype] = {
    "lark": Chronotype(21.5, 7.5, 9.0, 23.8, 1.1),
    "intermediate": Chronotype(23.0, 7.5, 11.0, 24.2, 1.0),
    "owl": Chronotype(1.0, 7.5, 15.0, 24.5, 0.9),
}


def _in_window(hour: float, start: float, duration: float) -> bool:
    return (hour - start) % 24.0 < duration


class CircadianClock:
    """Advances only by explicit elapsed hours."""

    def __init__(self, *, chronotype: str = "intermediate", start_hour: float = 8.0) -> None:
        if chronotype not in CHRONOTYPES:
            raise ValueError(f"Unknown chronotype '{chronotype}'. Expected one of: {', '.join(CHRONOTYPES)}")
        self.chronotype = chronotype
        self.start_hour = float(start_hour) % 24.0
        self.clock_hours = 0.0
        self.internal_hour = self.start_hour
        self.sleep_debt = 0.0
        self.hours_awake = 0.0
        self.ultradian_phase = 0.0
        self.last_activity_hours: float | None = None
        self.asleep = self._in_sleep_window(self.start_hour)

    @property
    def profile(self) -> Chronotype:
        return CHRONOTYPES[self.chronotype]

    @property
    def hour_of_day(self) -> float:
        return (self.start_hour + self.clock_hours) % 24.0

    @property
    def day_index(self) -> int:
        return int((self.start_hour + self.clock_hours) // 24.0)

    def _in_sleep_window(self, hour: float) -> bool:
        profile = self.profile
        return _in_window(hour, profile.sleep_onset, profile.sleep_duration)

    def _kept_awake(self) -> bool:
        if self.last_activity_hours is None:
            return False
        return self.clock_hours - self.last_activity_hours < ACTIVITY_WINDOW_HOURS

    def record_activity(self) -> None:
        """Mark an interaction; it keeps the persona awake for a while."""
        self.last_activity_hours = self.clock_hours
        if self.asleep:
            self.asleep = False
            logger.debug("Woken by activity at %.2f h", self.hour_of_day)

    def advance(self, hours: float) -> None:
        if hours <= 0:
            return
        remaining = float(hours)
        profile = self.profile
        while remaining > 1e-12:
            dt = min(STEP_HOURS, remaining)
            remaining -= dt
            hour = self.hour_of_day
            asleep = self._in_sleep_window(hour) and not self._kept_awake()
            if asleep:
                self.sleep_debt = max(0.0, self.sleep_debt - dt * SLEEP_RECOVERY_RATE)
                self.hours_awake = 0.0
            else:
                if self._in_sleep_window(hour):
                    self.sleep_debt += dt
                self.hours_awake += dt
            self.asleep = asleep

            drift = dt * 24.0 / profile.period_hours
            pull = self._phase_error() * profile.light_sensitivity * zeitgeber_strength(hour) * ENTRAINMENT_RATE * dt
            self.internal_hour = (self.internal_hour + drift + pull) % 24.0
            self.ultradian_phase = (self.ultradian_phase + dt * 60.0 / ULTRADIAN_MINUTES) % 1.0
            self.clock_hours += dt

    def _phase_error(self) -> float:
        """External minus internal hour, wrapped to ``[-12, 12]``."""
        angle = (self.hour_of_day - self.internal_hour) / 24.0 * 2.0 * math.pi
        return wrap_angle(angle) / (2.0 * math.pi) * 24.0

    def apply_phase_shift(self, shift_hours: float) -> None:
        """Shift the internal rhythm; positive values advance it."""
        self.internal_hour = (self.internal_hour + float(shift_hours)) % 24.0

    def ultradian_multiplier(self) -> float:
        return 1.0 + 0.25 * math.sin(2.0 * math.pi * self.ultradian_phase)

    def alertness(self) -> float:
        peak = self.profile.peak_alertness
        rhythm = 0.5 + 0.5 * math.cos((self.internal_hour - peak) / 24.0 * 2.0 * math.pi)
        value = rhythm - self.sleep_debt * 0.05 - (0.3 if self.asleep else 0.0)
        return max(0.0, min(1.0, value))

    def get_state(self) -> dict[str, Any]:
        return {
            "clock_hours": round(self.clock_hours, 4),
            "hour_of_day": round(self.hour_of_day, 4),
            "internal_hour": round(self.internal_hour, 4),
            "day_index": self.day_index,
            "phase": circadian_phase_label(self.hour_of_day),
            "asleep": self.asleep,
            "sleep_debt": round(self.sleep_debt, 4),
            "hours_awake": round(self.hours_awake, 4),
            "ultradian_phase": round(self.ultradian_phase, 4),
            "alertness": round(self.alertness(), 4),
            "chronotype": self.chronotype,
            "profile": asdict(self.profile),
        }

    def serialize(self) -> dict[str, Any]:
        return {
            "chronotype": self.chronotype,
            "start_hour": self.start_hour,
            "clock_hours": self.clock_hours,
            "internal_hour": self.internal_hour,
            "sleep_debt": self.sleep_debt,
            "hours_awake": self.hours_awake,
            "ultradian_phase": self.ultradian_phase,
            "last_activity_hours": self.last_activity_hours,
            "asleep": self.asleep,
        }

    @classmethod
    def deserialize(cls, record: Mapping[str, Any]) -> "CircadianClock":
        data = require_keys(
            record,
            (
                "chronotype",
                "start_hour",
                "clock_hours",
                "internal_hour",
                "sleep_debt",
                "hours_awake",
                "ultradian_phase",
                "last_activity_hours",
                "asleep",
            ),
            context="CircadianClock",
        )

        def number(name: str) -> float:
            return coerce_value(data[name], "float", name=name, context="CircadianClock")

        chronotype = coerce_value(data["chronotype"], "str", name="chronotype", context="CircadianClock")
        start_hour = number("start_hour")
        try:
            clock = cls(chronotype=chronotype, start_hour=start_hour)
        except ValueError as exc:
            raise StateRestoreError(str(exc)) from exc
        clock.clock_hours = number("clock_hours")
        clock.internal_hour = number("internal_hour")
        clock.sleep_debt = number("sleep_debt")
        clock.hours_awake = number("hours_awake")
        clock.ultradian_phase = number("ultradian_phase")
        clock.last_activity_hours = None if data["last_activity_hours"] is None else number("last_activity_hours")
        clock.asleep = coerce_value(data["asleep"], "bool", name="asleep", context="CircadianClock")
        return clock


__all__ = ["CHRONOTYPES", "Chronotype", "CircadianClock"]
