"""Tests for the settings loader and its environment fallbacks."""

from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from app.settings import EngineSettings, clear_settings_cache


class EngineSettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        self.settings_path = Path(temp_dir.name) / "settings.json"
        clear_settings_cache()
        self.addCleanup(clear_settings_cache)

    def _load(self, data: dict, **env: str) -> EngineSettings:
        self.settings_path.write_text(json.dumps(data), encoding="utf-8")
        clear_settings_cache()
        with mock.patch.dict(os.environ, {"SOMATIC_SETTINGS_PATH": str(self.settings_path), **env}):
            return EngineSettings.load()

    def test_file_values_are_used(self) -> None:
        settings = self._load({"chronotype": "lark", "initial_cycle_day": 14, "telemetry_enabled": True})
        self.assertEqual(settings.chronotype, "lark")
        self.assertEqual(settings.initial_cycle_day, 14)
        self.assertTrue(settings.telemetry_enabled)
        self.assertEqual(settings.raw["chronotype"], "lark")

    def test_environment_fills_missing_keys(self) -> None:
        settings = self._load({}, SOMATIC_MIN_TICK_MS="250", SOMATIC_CHRONOTYPE="owl", SOMATIC_TELEMETRY="yes")
        self.assertEqual(settings.min_tick_ms, 250.0)
        self.assertEqual(settings.chronotype, "owl")
        self.assertTrue(settings.telemetry_enabled)

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        settings = self._load(
            {"chronotype": "vampire", "min_tick_ms": "soon", "persona_age": 90, "start_hour": 30, "memory_capacity": 0}
        )
        self.assertEqual(settings.chronotype, "intermediate")
        self.assertEqual(settings.min_tick_ms, 100.0)
        self.assertEqual(settings.persona_age, 55.0)
        self.assertEqual(settings.start_hour, 6.0)
        self.assertEqual(settings.memory_capacity, 1)

    def test_unknown_keys_are_reported(self) -> None:
        with self.assertLogs("somatic.settings", level="WARNING") as captured:
            settings = self._load({"llm_endpoint": "http://localhost", "persona_age": 31})
        self.assertEqual(settings.persona_age, 31.0)
        self.assertTrue(any("llm_endpoint" in line for line in captured.output))

    def test_missing_file_uses_defaults(self) -> None:
        clear_settings_cache()
        missing = self.settings_path.parent / "absent.json"
        with mock.patch.dict(os.environ, {"SOMATIC_SETTINGS_PATH": str(missing)}):
            settings = EngineSettings.load()
        self.assertEqual(settings.raw, {})
        self.assertEqual(settings.database_path, "data/sessions.db")
        self.assertFalse(settings.telemetry_enabled)

    def test_cache_is_cleared(self) -> None:
        first = self._load({"persona_age": 30})
        second = self._load({"persona_age": 40})
        self.assertEqual(first.persona_age, 30.0)
        self.assertEqual(second.persona_age, 40.0)


if __name__ == "__main__":
    unittest.main()
