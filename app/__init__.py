"""Application helper package."""

from . import settings, telemetry

__all__ = ["settings", "telemetry"]
