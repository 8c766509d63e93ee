"""Telemetry and logging helpers."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from hormones import endocrine_trace
from snapshot import StateSnapshot


def log_json_line(
    path: Path,
    payload: Mapping[str, Any],
    *,
    logger: logging.Logger | None = None,
) -> None:
    """Append a JSON payload to the given log path."""
    if not payload:
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except Exception as exc:  # pragma: no cover - diagnostics only
        if logger:
            logger.debug("Failed to append json line to %s: %s", path, exc)


def compose_tick_telemetry(
    snapshot: StateSnapshot,
    *,
    event: str = "tick",
    elapsed_ms: float | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build one compact telemetry record for a committed snapshot."""
    trace = endocrine_trace(snapshot)
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "event": event,
        "tick": snapshot.tick_count,
        "clock_hours": round(snapshot.clock_hours, 4),
        "mood": snapshot.mood,
        "cycle_day": snapshot.cycle.cycle_day,
        "cycle_phase": snapshot.cycle.cycle_phase,
        "cortisol_total": round(snapshot.stress.cortisol_total, 4),
        "acute_stress": round(snapshot.stress.acute_stress, 4),
        "arousal": round(snapshot.intimate.arousal, 4),
        "valence": round(snapshot.sync.valence, 4),
        "bands": {name: band for name, band in trace["bands"].items() if band != "steady"},
    }
    if elapsed_ms is not None:
        payload["elapsed_ms"] = elapsed_ms
    if extra:
        payload.update(extra)
    return payload


def log_tick_telemetry(
    snapshot: StateSnapshot,
    path: Path,
    *,
    event: str = "tick",
    elapsed_ms: float | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """Persist a tick summary for offline review."""
    log_json_line(path, compose_tick_telemetry(snapshot, event=event, elapsed_ms=elapsed_ms), logger=logger)


__all__ = ["compose_tick_telemetry", "log_json_line", "log_tick_telemetry"]
