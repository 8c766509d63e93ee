from __future__ import annotations

import asyncio
import json
from pathlib import Path

from app.telemetry import compose_tick_telemetry, log_json_line, log_tick_telemetry
from state_engine import StateEngine, Trigger


class TelemetryHelperTests:
    def setup_method(self) -> None:
        self.engine = StateEngine()

    def test_compose_tick_telemetry_contains_summary(self) -> None:
        snapshot = asyncio.run(self.engine.tick(Trigger(elapsed_ms=600_000.0, stressor=0.8)))
        payload = compose_tick_telemetry(snapshot, elapsed_ms=600_000.0, extra={"session": "diag"})
        for key in ("timestamp", "event", "tick", "mood", "cycle_phase", "cortisol_total", "bands"):
            assert key in payload
        assert payload["tick"] == 1
        assert payload["elapsed_ms"] == 600_000.0
        assert payload["session"] == "diag"
        assert payload["timestamp"].endswith("Z")
        assert "steady" not in payload["bands"].values()

    def test_tick_telemetry_written(self, tmp_path: Path) -> None:
        target = tmp_path / "logs" / "ticks.jsonl"
        log_tick_telemetry(self.engine.snapshot(), target, event="stimulus")
        log_tick_telemetry(self.engine.snapshot(), target)
        lines = target.read_text(encoding="utf-8").strip().splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["event"] == "stimulus"
        assert first["mood"] == self.engine.snapshot().mood

    def test_empty_payload_is_skipped(self, tmp_path: Path) -> None:
        target = tmp_path / "empty.jsonl"
        log_json_line(target, {})
        assert not target.exists()
