"""Episodic affective memory store with congruence-weighted retrieval."""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping

from bridges.affect import state_to_affect
from snapshot import EmotionState, StateSnapshot
from utils.numeric import clamp, clamp_signed
from utils.serialization import StateRestoreError, coerce_value, require_keys

from .records import (
    AUTOBIOGRAPHICAL,
    CONSOLIDATED,
    CONSOLIDATING,
    FLASHBULB,
    IMPLICIT,
    LONG_TERM_EPISODIC,
    PROCEDURAL,
    TRANSIENT,
    AffectiveMemoryRecord,
)

logger = logging.getLogger("somatic.memory")

DEFAULT_CAPACITY = 200
RETRIEVAL_THRESHOLD = 0.1
ENCODING_FLOOR = 0.3
SALIENCE_HALF_LIFE_HOURS = 168.0
PRUNE_FLOOR = 0.01
CONSOLIDATING_AFTER_HOURS = 1.0
CONSOLIDATED_AFTER_HOURS = 24.0
REPRESSION_CONGRUENCE = 0.8
REPRESSION_SIMILARITY = 0.5


def _tokens(text: str) -> set[str]:
    return set((text or "").lower().split())


def text_similarity(left: str, right: str) -> float:
    """Jaccard similarity over lowercase whitespace tokens."""
    a, b = _tokens(left), _tokens(right)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def context_valence(emotional_context: EmotionState | Mapping[str, float]) -> float:
    if isinstance(emotional_context, EmotionState):
        emotional_context = emotional_context.as_dict()

    def level(key: str) -> float:
        return float(emotional_context.get(key, 0.0))

    return (level("happiness") - level("sadness")) + (level("love") - level("fear"))


def _copy(record: AffectiveMemoryRecord) -> AffectiveMemoryRecord:
    return replace(
        record,
        stimulus_metadata=copy.deepcopy(record.stimulus_metadata),
        neurochemical_snapshot=dict(record.neurochemical_snapshot),
    )


@dataclass(frozen=True)
class RetrievedMemory:
    record: AffectiveMemoryRecord
    relevance: float


class AffectiveMemoryStore:
    """Owns the memory records and is the only writer of their salience and consolidation."""

    def __init__(self, *, capacity: int = DEFAULT_CAPACITY, retrieval_threshold: float = RETRIEVAL_THRESHOLD) -> None:
        self.capacity = max(1, int(capacity))
        self.retrieval_threshold = retrieval_threshold
        self._records: list[AffectiveMemoryRecord] = []
        self._sequence = 0
        self._clock_hours = 0.0

    def __len__(self) -> int:
        return len(self._records)

    @property
    def clock_hours(self) -> float:
        return self._clock_hours

    def records(self) -> list[AffectiveMemoryRecord]:
        """Copies of the stored records, oldest first."""
        return [_copy(record) for record in self._records]

    def get(self, memory_id: str) -> AffectiveMemoryRecord | None:
        for record in self._records:
            if record.id == memory_id:
                return _copy(record)
        return None

    def _next_id(self) -> str:
        self._sequence += 1
        return f"mem-{self._sequence:05d}"

    def _store(self, record: AffectiveMemoryRecord) -> None:
        """Append ``record``, evicting the oldest unrepressed memories over capacity.

        Repressed memories are never evicted, so a store full of them grows past
        its capacity rather than losing one.
        """
        self._records.append(record)
        while len(self._records) > self.capacity:
            victim = next((r for r in self._records if not r.repressed), None)
            if victim is None:
                logger.debug("All %s memories are repressed; keeping them over capacity", len(self._records))
                break
            self._records.remove(victim)
            logger.debug("Evicted memory %s (capacity %s)", victim.id, self.capacity)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------
    def encode(
        self,
        stimulus: str,
        response_text: str,
        snapshot: StateSnapshot,
        metadata: Mapping[str, Any] | None = None,
    ) -> AffectiveMemoryRecord | None:
        """Classify and store an interaction; mundane events return ``None``."""
        metadata = dict(metadata or {})
        affect = state_to_affect(snapshot)
        neuro = snapshot.neuro
        valence = affect.valence
        salience = clamp(max(neuro.cortisol, neuro.dopamine, neuro.endorphin_rush, affect.arousal))
        if salience < ENCODING_FLOOR and abs(valence) < ENCODING_FLOOR:
            return None

        if salience > 0.9 and abs(valence) > 0.8:
            memory_type = FLASHBULB
        elif metadata.get("procedural"):
            memory_type = PROCEDURAL
        elif salience < 0.1:
            memory_type = IMPLICIT
        elif metadata.get("autobiographical"):
            memory_type = AUTOBIOGRAPHICAL
        else:
            memory_type = LONG_TERM_EPISODIC

        record = AffectiveMemoryRecord(
            id=self._next_id(),
            encoded_at=self._clock_hours,
            stimulus_text=stimulus,
            response_text=response_text,
            valence=clamp_signed(valence),
            salience=salience,
            memory_type=memory_type,
            stimulus_metadata=metadata,
            neurochemical_snapshot={
                "dopamine": neuro.dopamine,
                "oxytocin": neuro.oxytocin,
                "cortisol": neuro.cortisol,
                "endorphin_rush": neuro.endorphin_rush,
            },
            repressed=neuro.cortisol > 0.85 and valence < -0.7,
            subconscious=memory_type in (IMPLICIT, PROCEDURAL),
            pleasure=affect.valence,
            arousal=affect.arousal,
            dominance=affect.dominance,
        )
        self._store(record)
        return _copy(record)

    def create_traumatic_memory(self, stimulus: str, intensity: float, repress: bool = False) -> AffectiveMemoryRecord:
        i = clamp(intensity)
        record = AffectiveMemoryRecord(
            id=self._next_id(),
            encoded_at=self._clock_hours,
            stimulus_text=stimulus,
            response_text="",
            valence=-i,
            salience=clamp(0.5 + i * 0.5),
            memory_type=FLASHBULB,
            consolidation_status=CONSOLIDATED,
            neurochemical_snapshot={
                "dopamine": 0.1,
                "oxytocin": 0.0,
                "cortisol": clamp(0.5 + i * 0.5),
                "endorphin_rush": 0.0,
            },
            repressed=bool(repress),
            subconscious=True,
            trauma=True,
            pleasure=-i,
            arousal=i,
            dominance=-i,
        )
        self._store(record)
        logger.debug("Traumatic memory %s created (intensity=%.2f, repressed=%s)", record.id, i, repress)
        return _copy(record)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    def relevance(
        self,
        record: AffectiveMemoryRecord,
        stimulus: str,
        emotional_context: EmotionState | Mapping[str, float],
    ) -> float:
        """Composite relevance of one record, before thresholding."""
        similarity = text_similarity(stimulus, record.stimulus_text)
        congruence = clamp(1.0 - abs(record.valence - context_valence(emotional_context)) / 2.0)
        gate = 1.0
        if record.repressed:
            triggered = congruence > REPRESSION_CONGRUENCE and similarity > REPRESSION_SIMILARITY
            gate = 1.0 if triggered else 0.1
        return (0.6 * similarity + 0.4 * congruence) * gate * record.salience

    def retrieve(
        self,
        stimulus: str,
        emotional_context: EmotionState | Mapping[str, float],
        limit: int | None = None,
    ) -> list[RetrievedMemory]:
        scored = [
            RetrievedMemory(record=_copy(record), relevance=self.relevance(record, stimulus, emotional_context))
            for record in self._records
        ]
        ranked = sorted(
            (item for item in scored if item.relevance > self.retrieval_threshold),
            key=lambda item: item.relevance,
            reverse=True,
        )
        return ranked if limit is None else ranked[:limit]

    def reinforce(self, memory_id: str) -> bool:
        """Strengthen a recalled memory; unknown ids are ignored."""
        for record in self._records:
            if record.id == memory_id:
                record.salience = min(1.0, record.salience * 1.1 + 0.05)
                if record.consolidation_status == TRANSIENT:
                    record.consolidation_status = CONSOLIDATING
                return True
        return False

    # ------------------------------------------------------------------
    # Time evolution
    # ------------------------------------------------------------------
    def decay_and_consolidate(self, hours: float) -> None:
        if hours <= 0:
            return
        rate = math.log(2.0) / SALIENCE_HALF_LIFE_HOURS
        self._clock_hours += hours
        for record in self._records:
            record.age_hours += hours
            if record.repressed:
                multiplier = 0.0
            elif record.trauma or record.memory_type in (FLASHBULB, AUTOBIOGRAPHICAL):
                multiplier = 0.25
            else:
                multiplier = 1.0
            record.salience = clamp(record.salience * math.exp(-rate * hours * multiplier))
            if record.age_hours > CONSOLIDATED_AFTER_HOURS:
                record.consolidation_status = CONSOLIDATED
                if record.memory_type == IMPLICIT and record.salience > 0.6:
                    record.memory_type = LONG_TERM_EPISODIC
            elif record.age_hours > CONSOLIDATING_AFTER_HOURS and record.consolidation_status == TRANSIENT:
                record.consolidation_status = CONSOLIDATING
        before = len(self._records)
        self._records = [r for r in self._records if r.repressed or r.salience > PRUNE_FLOOR]
        if len(self._records) != before:
            logger.debug("Pruned %s faded memories", before - len(self._records))

    # ------------------------------------------------------------------
    # Aggregates used by emotion derivation
    # ------------------------------------------------------------------
    def recent_negative(self, window: int = 10, threshold: float = -0.3) -> list[AffectiveMemoryRecord]:
        return [_copy(r) for r in self._records[-window:] if r.valence < threshold]

    def trauma_records(self) -> list[AffectiveMemoryRecord]:
        return [_copy(r) for r in self._records if r.trauma]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def serialize(self) -> dict[str, Any]:
        return {
            "capacity": self.capacity,
            "retrieval_threshold": self.retrieval_threshold,
            "sequence": self._sequence,
            "clock_hours": self._clock_hours,
            "records": [record.as_dict() for record in self._records],
        }

    @classmethod
    def deserialize(cls, record: Mapping[str, Any]) -> "AffectiveMemoryStore":
        context = "AffectiveMemoryStore"
        data = require_keys(
            record,
            ("capacity", "retrieval_threshold", "sequence", "clock_hours", "records"),
            context=context,
        )
        if not isinstance(data["records"], list):
            raise StateRestoreError("AffectiveMemoryStore records must be a list")
        store = cls(
            capacity=coerce_value(data["capacity"], "int", name="capacity", context=context),
            retrieval_threshold=coerce_value(
                data["retrieval_threshold"], "float", name="retrieval_threshold", context=context
            ),
        )
        store._sequence = coerce_value(data["sequence"], "int", name="sequence", context=context)
        store._clock_hours = coerce_value(data["clock_hours"], "float", name="clock_hours", context=context)
        store._records = [AffectiveMemoryRecord.from_dict(item) for item in data["records"]]
        return store


__all__ = ["AffectiveMemoryStore", "RetrievedMemory", "context_valence", "text_similarity"]
