"""Session persistence exports."""

from .models import SessionRecord
from .repository import SessionRepository

__all__ = ["SessionRecord", "SessionRepository"]
