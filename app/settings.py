"""Runtime settings loader and related helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from state_engine.clock import CHRONOTYPES
from utils.settings import load_settings, settings_path, unknown_keys

logger = logging.getLogger("somatic.settings")

SETTING_KEYS = (
    "min_tick_ms",
    "persona_age",
    "initial_cycle_day",
    "start_hour",
    "chronotype",
    "memory_capacity",
    "database_path",
    "telemetry_path",
    "telemetry_enabled",
)


def _parse_float(value: Any, default: float) -> float:
    if value in (None, ""):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _parse_int(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    if value in (None, ""):
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on", "enable", "enabled"}:
            return True
        if normalized in {"0", "false", "no", "off", "disable", "disabled"}:
            return False
    return default


def _get_setting(settings: dict[str, Any], key: str, env_var: str, default: Any = None) -> Any:
    value = settings.get(key)
    if value not in (None, ""):
        return value
    env_value = os.getenv(env_var)
    if env_value not in (None, ""):
        return env_value
    return default


@dataclass(frozen=True)
class EngineSettings:
    raw: dict[str, Any]
    min_tick_ms: float
    persona_age: float
    initial_cycle_day: int
    start_hour: float
    chronotype: str
    memory_capacity: int
    database_path: str
    telemetry_path: str
    telemetry_enabled: bool

    @classmethod
    def load(cls) -> "EngineSettings":
        settings = load_settings()
        ignored = unknown_keys(settings, SETTING_KEYS)
        if ignored:
            logger.warning("Ignoring unknown settings in %s: %s", settings_path(), ", ".join(ignored))

        def getter(key: str, env: str, default: Any = None) -> Any:
            return _get_setting(settings, key, env, default)

        min_tick_ms = max(0.0, _parse_float(getter("min_tick_ms", "SOMATIC_MIN_TICK_MS"), 100.0))
        persona_age = min(55.0, max(13.0, _parse_float(getter("persona_age", "SOMATIC_PERSONA_AGE"), 25.0)))
        initial_cycle_day = min(35, max(1, _parse_int(getter("initial_cycle_day", "SOMATIC_INITIAL_CYCLE_DAY"), 1)))
        start_hour = _parse_float(getter("start_hour", "SOMATIC_START_HOUR"), 8.0) % 24.0
        chronotype = str(getter("chronotype", "SOMATIC_CHRONOTYPE", "intermediate") or "").strip().lower()
        if chronotype not in CHRONOTYPES:
            logger.warning("Unknown chronotype %r; using intermediate", chronotype)
            chronotype = "intermediate"
        memory_capacity = max(1, _parse_int(getter("memory_capacity", "SOMATIC_MEMORY_CAPACITY"), 200))
        database_path = str(getter("database_path", "SOMATIC_DATABASE_PATH", "data/sessions.db") or "").strip()
        telemetry_path = str(
            getter("telemetry_path", "SOMATIC_TELEMETRY_PATH", "logs/tick_telemetry.jsonl") or ""
        ).strip()
        telemetry_enabled = _parse_bool(getter("telemetry_enabled", "SOMATIC_TELEMETRY"), False)

        return cls(
            raw=settings,
            min_tick_ms=min_tick_ms,
            persona_age=persona_age,
            initial_cycle_day=initial_cycle_day,
            start_hour=start_hour,
            chronotype=chronotype,
            memory_capacity=memory_capacity,
            database_path=database_path,
            telemetry_path=telemetry_path,
            telemetry_enabled=telemetry_enabled,
        )


__all__ = ["EngineSettings"]


def clear_settings_cache() -> None:
    """Reset the cached settings loader."""
    load_settings.cache_clear()


__all__.append("clear_settings_cache")
