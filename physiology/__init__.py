"""Intimate physiology exports."""

from .intimate import (
    CLIMAX_CEILING,
    PHASE_RESPONSE,
    IntimateStepResult,
    PhaseResponse,
    SexualContext,
    Stimulus,
    build_sexual_context,
    feedback_text,
    recover,
    step,
    vocalization_flag,
)

__all__ = [
    "CLIMAX_CEILING",
    "IntimateStepResult",
    "PHASE_RESPONSE",
    "PhaseResponse",
    "SexualContext",
    "Stimulus",
    "build_sexual_context",
    "feedback_text",
    "recover",
    "step",
    "vocalization_flag",
]
