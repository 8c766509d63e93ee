"""Locate and read the engine settings file."""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable

logger = logging.getLogger("somatic.settings")
BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_SETTINGS_FILE = "settings.json"


def settings_path() -> Path:
    """Path of the active settings file; ``SOMATIC_SETTINGS_PATH`` wins over the config directory."""
    explicit = os.getenv("SOMATIC_SETTINGS_PATH")
    if explicit:
        return Path(explicit).expanduser()
    return BASE_DIR / "config" / os.getenv("SOMATIC_SETTINGS_FILE", DEFAULT_SETTINGS_FILE)


def _read_object(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file %s must contain a JSON object, got %s", path, type(data).__name__)
        return {}
    return data


@lru_cache(maxsize=1)
def load_settings() -> Dict[str, Any]:
    """Settings from the active file, or an empty mapping when there is none."""
    path = settings_path()
    if not path.is_file():
        logger.debug("No settings file at %s; using defaults", path)
        return {}
    data = _read_object(path)
    logger.debug("Loaded %s settings from %s", len(data), path)
    return data


def unknown_keys(settings: Dict[str, Any], known: Iterable[str]) -> list[str]:
    """Keys present in ``settings`` that no consumer reads."""
    expected = set(known)
    return sorted(key for key in settings if key not in expected)


__all__ = ["DEFAULT_SETTINGS_FILE", "load_settings", "settings_path", "unknown_keys"]
