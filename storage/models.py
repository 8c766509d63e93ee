"""SQLModel models for persisted engine sessions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class SessionRecord(SQLModel, table=True):
    """Serialized engine bundle for one session at one point in simulated time."""

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(index=True, min_length=1)
    clock_hours: float = Field(default=0.0, ge=0.0)
    mood: Optional[str] = Field(default=None, index=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
