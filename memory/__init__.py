"""Affective memory subsystem exports."""

from .records import CONSOLIDATION_STAGES, MEMORY_TYPES, AffectiveMemoryRecord
from .store import AffectiveMemoryStore, RetrievedMemory, context_valence, text_similarity

__all__ = [
    "AffectiveMemoryRecord",
    "AffectiveMemoryStore",
    "CONSOLIDATION_STAGES",
    "MEMORY_TYPES",
    "RetrievedMemory",
    "context_valence",
    "text_similarity",
]
