"""Persistence helpers for saving and restoring engine sessions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from sqlmodel import Session, SQLModel, create_engine, select

from .models import SessionRecord

logger = logging.getLogger("somatic.storage")


class SessionRepository:
    """Stores serialized engine sessions in SQLite."""

    def __init__(self, database_path: Path | None = None) -> None:
        self.database_path = database_path or Path(__file__).resolve().parent / "sessions.db"
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_engine(f"sqlite:///{self.database_path}", echo=False)
        SQLModel.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager yielding a SQLModel session."""
        with Session(self._engine) as session:
            yield session

    def save(
        self,
        session_id: str,
        payload: Mapping[str, Any],
        *,
        clock_hours: float = 0.0,
        mood: str | None = None,
    ) -> SessionRecord:
        """Persist a serialized bundle and return the refreshed row."""
        record = SessionRecord(session_id=session_id, clock_hours=clock_hours, mood=mood, payload=dict(payload))
        with self.session() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
        logger.info("Saved session %s at %.2f simulated hours", session_id, clock_hours)
        return record

    def latest(self, session_id: str) -> SessionRecord | None:
        statement = (
            select(SessionRecord)
            .where(SessionRecord.session_id == session_id)
            .order_by(SessionRecord.created_at.desc(), SessionRecord.id.desc())
            .limit(1)
        )
        with self.session() as session:
            return session.exec(statement).first()

    def recent(self, limit: int = 5) -> Sequence[SessionRecord]:
        """Fetch the most recently saved sessions."""
        statement = (
            select(SessionRecord)
            .order_by(SessionRecord.created_at.desc(), SessionRecord.id.desc())
            .limit(limit)
        )
        with self.session() as session:
            return list(session.exec(statement))

    def dispose(self) -> None:
        """Release database connections to allow filesystem cleanup."""
        self._engine.dispose()
