"""Helpers for the plain-record serialization contract."""

from __future__ import annotations

import math
from dataclasses import fields
from typing import Any, Iterable, Mapping

SCALAR_KINDS = ("bool", "float", "int", "str")


class StateRestoreError(ValueError):
    """Raised when a persisted record cannot be restored faithfully."""


def require_keys(record: Any, keys: Iterable[str], *, context: str) -> Mapping[str, Any]:
    """Return ``record`` as a mapping after checking every key is present."""
    if not isinstance(record, Mapping):
        raise StateRestoreError(f"{context} record must be a mapping, got {type(record).__name__}")
    missing = sorted(key for key in keys if key not in record)
    if missing:
        raise StateRestoreError(f"{context} record is missing keys: {', '.join(missing)}")
    return record


def coerce_value(value: Any, kind: str, *, name: str, context: str) -> Any:
    """Check ``value`` against a scalar ``kind``; other kinds pass through.

    Numbers must be finite and booleans are not accepted as numbers. Float
    fields keep integer values as written; integer fields take integral
    floats, since JSON encoders may write ``3.0``.
    """
    if kind not in SCALAR_KINDS:
        return value
    if kind == "bool" and isinstance(value, bool):
        return value
    if kind == "str" and isinstance(value, str):
        return value
    if kind in ("float", "int") and isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isfinite(value):
            if kind == "float":
                return value
            if float(value).is_integer():
                return int(value)
    raise StateRestoreError(f"{context}.{name} must be a finite {kind}, got {value!r}")


def coerce_fields(record_type: type, record: Any, *, context: str | None = None) -> dict[str, Any]:
    """Pull every dataclass field of ``record_type`` out of ``record``.

    Scalar fields are checked with :func:`coerce_value`; anything else is
    returned untouched for the caller to rebuild.
    """
    context = context or record_type.__name__
    names = [item.name for item in fields(record_type)]
    data = require_keys(record, names, context=context)
    values: dict[str, Any] = {}
    for item in fields(record_type):
        kind = item.type if isinstance(item.type, str) else getattr(item.type, "__name__", "")
        values[item.name] = coerce_value(data[item.name], kind, name=item.name, context=context)
    return values


__all__ = ["SCALAR_KINDS", "StateRestoreError", "coerce_fields", "coerce_value", "require_keys"]
