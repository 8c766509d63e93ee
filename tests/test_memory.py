"""Unit tests for the affective memory store."""

from __future__ import annotations

import unittest

from memory import AffectiveMemoryStore, text_similarity
from memory.records import CONSOLIDATED, CONSOLIDATING, FLASHBULB, TRANSIENT
from snapshot import StateSnapshot
from utils.serialization import StateRestoreError

CONGRUENT_CONTEXT = {"sadness": 0.5, "fear": 0.4}
NEUTRAL_CONTEXT: dict[str, float] = {}


def _salient_snapshot() -> StateSnapshot:
    snapshot = StateSnapshot()
    return snapshot.evolve(neuro=snapshot.neuro.update(dopamine=0.7, oxytocin=0.6))


def _mundane_snapshot() -> StateSnapshot:
    snapshot = StateSnapshot()
    return snapshot.evolve(neuro=snapshot.neuro.update(dopamine=0.1, cortisol=0.1))


class AffectiveMemoryStoreTests(unittest.TestCase):
    """Encoding, retrieval, repression, and consolidation behavior."""

    def test_mundane_interactions_are_not_encoded(self) -> None:
        store = AffectiveMemoryStore()
        self.assertIsNone(store.encode("ok", "sure", _mundane_snapshot()))
        self.assertEqual(len(store), 0)

    def test_salient_interaction_is_encoded_with_sequential_id(self) -> None:
        store = AffectiveMemoryStore()
        first = store.encode("we watched the sunrise", "it was lovely", _salient_snapshot())
        second = store.encode("we talked about music", "I loved it", _salient_snapshot())
        self.assertIsNotNone(first)
        self.assertIsNotNone(second)
        assert first is not None and second is not None
        self.assertEqual(first.id, "mem-00001")
        self.assertEqual(second.id, "mem-00002")
        self.assertEqual(first.consolidation_status, TRANSIENT)
        self.assertGreater(first.valence, 0.0)

    def test_retrieval_prefers_similar_stimuli(self) -> None:
        store = AffectiveMemoryStore()
        store.encode("we watched the sunrise at the beach", "", _salient_snapshot())
        store.encode("the tax forms were confusing", "", _salient_snapshot())
        results = store.retrieve("sunrise at the beach", NEUTRAL_CONTEXT)
        self.assertTrue(results)
        self.assertIn("sunrise", results[0].record.stimulus_text)
        ordered = [item.relevance for item in results]
        self.assertEqual(ordered, sorted(ordered, reverse=True))

    def test_repression_gates_only_unmatched_recall(self) -> None:
        store = AffectiveMemoryStore()
        open_record = store.create_traumatic_memory("the car crash on the bridge", 0.9)
        hidden_record = store.create_traumatic_memory("the car crash on the bridge", 0.9, repress=True)
        records = {record.id: record for record in store.records()}
        visible, hidden = records[open_record.id], records[hidden_record.id]

        matched_open = store.relevance(visible, "the car crash on the bridge", CONGRUENT_CONTEXT)
        matched_hidden = store.relevance(hidden, "the car crash on the bridge", CONGRUENT_CONTEXT)
        self.assertAlmostEqual(matched_hidden, matched_open)

        unmatched_open = store.relevance(visible, "a quiet afternoon", NEUTRAL_CONTEXT)
        unmatched_hidden = store.relevance(hidden, "a quiet afternoon", NEUTRAL_CONTEXT)
        self.assertAlmostEqual(unmatched_hidden, unmatched_open * 0.1)

    def test_reinforce_strengthens_and_ignores_unknown_ids(self) -> None:
        store = AffectiveMemoryStore()
        record = store.encode("a shared joke", "", _salient_snapshot())
        assert record is not None
        self.assertTrue(store.reinforce(record.id))
        updated = store.get(record.id)
        assert updated is not None
        self.assertGreater(updated.salience, record.salience)
        self.assertEqual(updated.consolidation_status, CONSOLIDATING)
        self.assertFalse(store.reinforce("mem-99999"))

    def test_consolidation_and_salience_decay(self) -> None:
        store = AffectiveMemoryStore()
        record = store.encode("a long walk", "", _salient_snapshot())
        trauma = store.create_traumatic_memory("a loud argument", 0.6)
        assert record is not None
        store.decay_and_consolidate(30.0)
        aged = store.get(record.id)
        kept = store.get(trauma.id)
        assert aged is not None and kept is not None
        self.assertEqual(aged.consolidation_status, CONSOLIDATED)
        self.assertLess(aged.salience, record.salience)
        self.assertEqual(kept.memory_type, FLASHBULB)
        self.assertGreater(kept.salience / trauma.salience, aged.salience / record.salience)
        self.assertAlmostEqual(store.clock_hours, 30.0)

    def test_repressed_memories_do_not_fade(self) -> None:
        store = AffectiveMemoryStore()
        hidden = store.create_traumatic_memory("the flood", 0.8, repress=True)
        store.decay_and_consolidate(5000.0)
        kept = store.get(hidden.id)
        assert kept is not None
        self.assertAlmostEqual(kept.salience, hidden.salience)

    def test_capacity_evicts_oldest_unrepressed(self) -> None:
        store = AffectiveMemoryStore(capacity=3)
        hidden = store.create_traumatic_memory("old wound", 0.7, repress=True)
        for index in range(4):
            store.encode(f"event number {index}", "", _salient_snapshot())
        ids = [record.id for record in store.records()]
        self.assertEqual(len(ids), 3)
        self.assertIn(hidden.id, ids)
        self.assertNotIn("mem-00002", ids)

    def test_repressed_memories_are_kept_over_capacity(self) -> None:
        store = AffectiveMemoryStore(capacity=2)
        wounds = [store.create_traumatic_memory(f"wound {index}", 0.6, repress=True) for index in range(3)]
        self.assertEqual([record.id for record in store.records()], [record.id for record in wounds])
        store.encode("a sunny walk", "", _salient_snapshot())
        ids = [record.id for record in store.records()]
        self.assertEqual(ids, [record.id for record in wounds])

    def test_returned_records_do_not_share_state(self) -> None:
        store = AffectiveMemoryStore()
        encoded = store.encode("a bright morning", "", _salient_snapshot(), metadata={"tags": ["sun"]})
        assert encoded is not None
        encoded.stimulus_metadata["tags"].append("rain")
        encoded.neurochemical_snapshot["dopamine"] = 0.0
        fetched = store.get(encoded.id)
        assert fetched is not None
        self.assertEqual(fetched.stimulus_metadata, {"tags": ["sun"]})
        self.assertGreater(fetched.neurochemical_snapshot["dopamine"], 0.0)
        fetched.stimulus_metadata["extra"] = True
        recalled = store.retrieve("a bright morning", NEUTRAL_CONTEXT)
        self.assertEqual(recalled[0].record.stimulus_metadata, {"tags": ["sun"]})
        trauma = store.create_traumatic_memory("the storm", 0.5)
        trauma.neurochemical_snapshot.clear()
        self.assertTrue(store.trauma_records()[0].neurochemical_snapshot)

    def test_round_trip_and_malformed_records(self) -> None:
        store = AffectiveMemoryStore()
        store.encode("a bright morning", "", _salient_snapshot())
        store.create_traumatic_memory("the storm", 0.5)
        restored = AffectiveMemoryStore.deserialize(store.serialize())
        self.assertEqual(restored.serialize(), store.serialize())
        with self.assertRaises(StateRestoreError):
            AffectiveMemoryStore.deserialize({"records": []})

    def test_deserialize_rejects_wrong_value_types(self) -> None:
        store = AffectiveMemoryStore()
        store.create_traumatic_memory("the storm", 0.5)
        for name, value in (("salience", "high"), ("repressed", "no"), ("stimulus_text", 7), ("stimulus_metadata", [])):
            record = store.serialize()
            record["records"][0][name] = value
            with self.subTest(field=name):
                with self.assertRaises(StateRestoreError):
                    AffectiveMemoryStore.deserialize(record)
        record = store.serialize()
        record["capacity"] = "many"
        with self.assertRaises(StateRestoreError):
            AffectiveMemoryStore.deserialize(record)

    def test_text_similarity(self) -> None:
        self.assertEqual(text_similarity("", ""), 0.0)
        self.assertEqual(text_similarity("A b", "a B"), 1.0)
        self.assertAlmostEqual(text_similarity("a b", "b c"), 1 / 3)


if __name__ == "__main__":
    unittest.main()
