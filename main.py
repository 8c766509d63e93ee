"""FastAPI service exposing the somatic state engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.settings import EngineSettings, clear_settings_cache
from app.telemetry import log_tick_telemetry
from bridges import AffectDimensions
from physiology import Stimulus
from physiology.intimate import STIMULUS_TYPES
from state_engine import StateEngine, Trigger, Zeitgeber
from storage import SessionRepository

BASE_DIR = Path(__file__).resolve().parent

logger = logging.getLogger("somatic.main")
engine_settings = EngineSettings.load()
app = FastAPI(title="Somatic State Engine")
state_engine = StateEngine.from_settings(engine_settings)
session_repository: SessionRepository | None = None


def _resolve_path(value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else BASE_DIR / path


def _get_repository() -> SessionRepository:
    global session_repository
    if session_repository is None:
        session_repository = SessionRepository(_resolve_path(engine_settings.database_path))
    return session_repository


def _record_telemetry(event: str, elapsed_ms: float | None = None) -> None:
    if not engine_settings.telemetry_enabled or not engine_settings.telemetry_path:
        return
    log_tick_telemetry(
        state_engine.snapshot(),
        _resolve_path(engine_settings.telemetry_path),
        event=event,
        elapsed_ms=elapsed_ms,
        logger=logger,
    )


def _validate_stimulus(name: str) -> str:
    normalized = name.strip().lower()
    if normalized not in STIMULUS_TYPES:
        raise ValueError(f"Unknown stimulus '{name}'. Expected one of: {', '.join(STIMULUS_TYPES)}")
    return normalized


class AffectPayload(BaseModel):
    valence: float = Field(0.0, ge=-1.0, le=1.0)
    arousal: float = Field(0.0, ge=-1.0, le=1.0)
    dominance: float = Field(0.0, ge=-1.0, le=1.0)


class ZeitgeberPayload(BaseModel):
    type: str = Field(..., min_length=1, description="Entraining cue such as light, social, or feeding.")
    intensity: float = Field(0.5, ge=0.0, le=1.0)
    duration_minutes: float = Field(30.0, ge=0.0)


class StimulusPayload(BaseModel):
    """Schema describing one intimate stimulus."""

    type: str = Field(..., min_length=1, description="Stimulus name, e.g. touch or touch_end.")
    pressure: float = Field(0.5, ge=0.0, le=1.0)
    velocity: float = Field(0.0, ge=0.0)


class TickPayload(BaseModel):
    """Schema describing one interaction trigger."""

    elapsed_ms: float = Field(..., ge=0.0, description="Simulated time since the previous trigger.")
    user_text: str | None = Field(default=None, max_length=4000)
    response_text: str | None = Field(default=None, max_length=8000)
    stimulus: StimulusPayload | None = None
    affect: AffectPayload | None = None
    stressor: float = Field(0.0, ge=0.0, le=1.0)
    stress_type: str | None = None
    zeitgeber: ZeitgeberPayload | None = None


class StressPayload(BaseModel):
    magnitude: float = Field(..., ge=0.0, le=1.0)
    stress_type: str | None = Field(default=None, description="psychological, social, or physical.")
    chronic_hours: float = Field(0.0, ge=0.0, description="Accumulate chronic load over this many hours instead.")


class AgePayload(BaseModel):
    age: float = Field(..., ge=0.0, le=120.0, description="Clamped to the supported 13-55 range.")


class SessionPayload(BaseModel):
    session_id: str = Field("default", min_length=1, max_length=128)


class SessionResetRequest(BaseModel):
    """Schema for resetting the in-memory engine."""

    reason: str | None = Field(default=None, description="Optional operator note explaining why the engine was reset.")


@app.get("/ping")
async def ping() -> dict[str, str]:
    """Simple health check endpoint reporting the latest mood."""
    return {"status": "alive", "mood": state_engine.snapshot().mood}


@app.get("/state")
async def get_state() -> dict[str, Any]:
    """Expose the most recent state snapshot."""
    state = state_engine.get_state()
    state["endocrine"] = state_engine.endocrine_snapshot()
    return state


@app.post("/tick")
async def post_tick(payload: TickPayload) -> dict[str, Any]:
    """Advance the engine by one trigger."""
    try:
        stimulus = None
        if payload.stimulus is not None:
            stimulus = Stimulus(
                _validate_stimulus(payload.stimulus.type),
                payload.stimulus.pressure,
                payload.stimulus.velocity,
            )
        trigger = Trigger(
            elapsed_ms=payload.elapsed_ms,
            user_text=payload.user_text,
            response_text=payload.response_text,
            stimulus=stimulus,
            affect=AffectDimensions(**payload.affect.model_dump()) if payload.affect else None,
            stressor=payload.stressor,
            stress_type=payload.stress_type,
            zeitgeber=Zeitgeber(**payload.zeitgeber.model_dump()) if payload.zeitgeber else None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    previous = state_engine.snapshot().tick_count
    snapshot = await state_engine.tick(trigger)
    advanced = snapshot.tick_count != previous
    if advanced:
        _record_telemetry("tick", payload.elapsed_ms)
    return {"advanced": advanced, "mood": snapshot.mood, "state": snapshot.as_dict()}


@app.post("/stimulus")
async def post_stimulus(payload: StimulusPayload) -> dict[str, Any]:
    """Apply an intimate stimulus without advancing simulated time."""
    try:
        stimulus_type = _validate_stimulus(payload.type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    outcome = await state_engine.apply_stimulus(stimulus_type, payload.pressure, payload.velocity)
    _record_telemetry("stimulus")
    return {
        "feedback": outcome.feedback_text,
        "vocalization": outcome.vocalization,
        "mood": outcome.snapshot.mood,
        "intimate": outcome.snapshot.intimate.as_dict(),
    }


@app.post("/stress")
async def post_stress(payload: StressPayload) -> dict[str, Any]:
    """Queue an acute stressor or accumulate chronic stress."""
    snapshot = await state_engine.apply_stress(
        payload.magnitude,
        stress_type=payload.stress_type,
        chronic_hours=payload.chronic_hours,
    )
    return {"status": "accepted", "stress": snapshot.stress.as_dict()}


@app.post("/persona/age")
async def post_persona_age(payload: AgePayload) -> dict[str, Any]:
    """Re-anchor age-dependent cycle baselines."""
    age = await state_engine.set_persona_age(payload.age)
    return {"status": "updated", "age": age}


@app.post("/stress/probes")
async def post_stress_probes() -> dict[str, Any]:
    """Run the simulated dexamethasone and ACTH probes."""
    return {"probes": await state_engine.clinical_probes()}


@app.get("/memories")
async def get_recent_memories(limit: int = 5) -> dict[str, Any]:
    """Return the most recent affective memories."""
    if limit <= 0:
        raise HTTPException(status_code=400, detail="limit must be positive")
    return {"memories": state_engine.memories(limit=limit)}


@app.get("/cycle")
async def get_cycle() -> dict[str, Any]:
    """Report cycle, fertility, PMDD, stress-axis, and chronodisruption details."""
    return state_engine.cycle_report()


@app.post("/session/save")
async def save_session(payload: SessionPayload) -> dict[str, Any]:
    """Persist the serialized engine bundle."""
    snapshot = state_engine.snapshot()
    record = _get_repository().save(
        payload.session_id,
        state_engine.serialize(),
        clock_hours=snapshot.clock_hours,
        mood=snapshot.mood,
    )
    return {"status": "saved", "session_id": record.session_id, "record_id": record.id}


@app.post("/session/load")
async def load_session(payload: SessionPayload) -> dict[str, Any]:
    """Restore the latest saved bundle for a session, or start fresh when it is unusable."""
    global state_engine
    record = _get_repository().latest(payload.session_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No saved session '{payload.session_id}'")
    state_engine = StateEngine.restore_or_fresh(
        record.payload,
        persona_age=engine_settings.persona_age,
        initial_cycle_day=engine_settings.initial_cycle_day,
        start_hour=engine_settings.start_hour,
        chronotype=engine_settings.chronotype,
        memory_capacity=engine_settings.memory_capacity,
        min_tick_ms=engine_settings.min_tick_ms,
    )
    logger.info("Loaded session %s", payload.session_id)
    return {"status": "loaded", "session_id": payload.session_id, "mood": state_engine.snapshot().mood}


@app.post("/session/reset")
async def reset_session(request: SessionResetRequest) -> dict[str, Any]:
    """Rebuild the engine from freshly reloaded settings without stopping the server."""
    global engine_settings, state_engine
    clear_settings_cache()
    engine_settings = EngineSettings.load()
    state_engine = StateEngine.from_settings(engine_settings)
    logger.info("Session reset (%s)", request.reason or "no reason given")
    return {"status": "reset", "reason": request.reason, "mood": state_engine.snapshot().mood}


@app.on_event("shutdown")
async def release_resources() -> None:
    """Dispose database connections when the app stops."""
    if session_repository is not None:
        session_repository.dispose()


if __name__ == "__main__":  # pragma: no cover - manual launch helper
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
