# tests/test_upsert_engine.py
"""Tests for UID-keyed upsert."""

from __future__ import annotations

import threading
import time

import pytest

from vacancy_rag.core.exceptions import StoreError
from vacancy_rag.ingestion.embedding import EmbeddedUnit
from vacancy_rag.ingestion.upsert import MAX_BACKOFF_SECONDS, UpsertEngine
from vacancy_rag.vector_db.base import UnitRecord
from vacancy_rag.vector_db.memory import InMemoryVectorStore


def _unit(uid, content=None, vector=(1.0, 0.0)):
    return EmbeddedUnit(
        content=content or f"Unit {uid} | Status: Vacant",
        metadata={"UID": uid},
        uid=uid,
        embedding=list(vector),
    )


class FlakyStore(InMemoryVectorStore):
    """Fails find_by_uid for chosen UIDs, a fixed number of times."""

    def __init__(self, failures):
        super().__init__()
        self.failures = dict(failures)
        self.lookups = 0

    def find_by_uid(self, source, uid):
        self.lookups += 1
        if self.failures.get(uid, 0) > 0:
            self.failures[uid] -= 1
            raise ConnectionError(f"lookup failed for {uid}")
        return super().find_by_uid(source, uid)


class TestUpsert:
    def test_first_run_inserts(self, store):
        result = UpsertEngine(store).upsert([_unit("S1_A"), _unit("S1_B")], "a.csv")

        assert (result.inserted, result.updated, result.failed) == (2, 0, 0)
        assert store.count("a.csv") == 2

    def test_second_run_updates_in_place(self, store):
        engine = UpsertEngine(store)
        engine.upsert([_unit("S1_A"), _unit("S1_B")], "a.csv")

        result = engine.upsert(
            [_unit("S1_A", "Unit S1_A | Status: Occupied"), _unit("S1_B")], "a.csv"
        )

        assert (result.inserted, result.updated, result.failed) == (0, 2, 0)
        assert store.count("a.csv") == 2
        unit = store.find_by_uid("a.csv", "S1_A")[0]
        assert unit.content == "Unit S1_A | Status: Occupied"
        assert unit.was_updated

    def test_same_uid_in_other_source_is_separate(self, store):
        engine = UpsertEngine(store)
        engine.upsert([_unit("S1_A")], "a.csv")
        result = engine.upsert([_unit("S1_A")], "b.csv")

        assert result.inserted == 1
        assert store.count() == 2

    def test_units_without_uid_always_insert(self, store):
        engine = UpsertEngine(store)
        units = [_unit(None, content="no uid row one"), _unit(None, content="no uid row two")]

        engine.upsert(units, "a.csv")
        result = engine.upsert(units, "a.csv")

        assert result.inserted == 2
        assert store.count("a.csv") == 4

    def test_repeated_uid_in_one_run_inserts_then_updates(self, store):
        units = [_unit("S1_A", "first"), _unit("S1_B"), _unit("S1_A", "second")]
        result = UpsertEngine(store, max_workers=4).upsert(units, "a.csv")

        assert (result.inserted, result.updated) == (2, 1)
        matches = store.find_by_uid("a.csv", "S1_A")
        assert len(matches) == 1
        assert matches[0].content == "second"

    def test_existing_duplicates_update_the_oldest(self, store, caplog):
        oldest = store.insert(UnitRecord(content="old", embedding=[1.0, 0.0], source="a.csv", uid="S1_A"))
        newer = store.insert(UnitRecord(content="dup", embedding=[1.0, 0.0], source="a.csv", uid="S1_A"))

        with caplog.at_level("WARNING"):
            result = UpsertEngine(store).upsert([_unit("S1_A", "fresh")], "a.csv")

        assert result.updated == 1
        by_id = {u.id: u for u in store.fetch_all("a.csv")}
        assert by_id[oldest].content == "fresh"
        assert by_id[newer].content == "dup"
        assert "share UID S1_A" in caplog.text

    def test_failed_unit_is_counted_and_run_continues(self):
        store = FlakyStore({"S1_B": 1})
        result = UpsertEngine(store).upsert([_unit("S1_A"), _unit("S1_B"), _unit("S1_C")], "a.csv")

        assert (result.inserted, result.updated, result.failed) == (2, 0, 1)
        assert result.total == 3
        assert result.error_details == ["S1_B: lookup failed for S1_B"]

    def test_retry_recovers(self):
        store = FlakyStore({"S1_A": 2})
        delays = []
        engine = UpsertEngine(store, max_retries=2, retry_backoff=0.5, sleep=delays.append)

        result = engine.upsert([_unit("S1_A")], "a.csv")

        assert result.inserted == 1
        assert delays == [0.5, 1.0]

    def test_retry_exhausted(self):
        store = FlakyStore({"S1_A": 5})
        delays = []
        engine = UpsertEngine(store, max_retries=1, retry_backoff=20.0, sleep=delays.append)

        result = engine.upsert([_unit("S1_A")], "a.csv")

        assert result.failed == 1
        assert delays == [MAX_BACKOFF_SECONDS]

    def test_batches_and_chunk_index(self, store):
        units = [_unit(f"S1_U{i}") for i in range(5)]
        result = UpsertEngine(store, batch_size=2).upsert(units, "a.csv")

        assert result.inserted == 5
        assert sorted(u.chunk_index for u in store.fetch_all("a.csv")) == [0, 1, 2, 3, 4]

    def test_empty_input(self, store):
        assert UpsertEngine(store).upsert([], "a.csv").total == 0

    @pytest.mark.parametrize(
        "kwargs", [{"max_workers": 0}, {"batch_size": 0}, {"max_retries": -1}]
    )
    def test_invalid_arguments(self, store, kwargs):
        with pytest.raises(ValueError):
            UpsertEngine(store, **kwargs)


class SlowLookupStore(InMemoryVectorStore):
    """Widens the gap between a UID lookup and the write that follows it."""

    def find_by_uid(self, source, uid):
        matches = super().find_by_uid(source, uid)
        time.sleep(0.005)
        return matches


class RecordingStore(InMemoryVectorStore):
    """Logs when each UID's lookup starts and its insert ends."""

    def __init__(self):
        super().__init__()
        self.events = []
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def find_by_uid(self, source, uid):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.events.append(("start", uid))
        time.sleep(0.005)
        return super().find_by_uid(source, uid)

    def insert(self, record):
        record_id = super().insert(record)
        with self._guard:
            self.active -= 1
            self.events.append(("end", record.uid))
        return record_id


class TestConcurrency:
    def test_parallel_runs_for_one_source_keep_one_record_per_uid(self):
        store = SlowLookupStore()
        engine = UpsertEngine(store, max_workers=4)
        first = [_unit(f"S1_U{i}") for i in range(6)]
        second = [_unit(f"S1_U{i}", f"second {i}") for i in range(3, 9)]
        barrier = threading.Barrier(2)
        results = []

        def run(units):
            barrier.wait()
            results.append(engine.upsert(units, "a.csv"))

        threads = [threading.Thread(target=run, args=(units,)) for units in (first, second)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert store.count("a.csv") == 9
        for i in range(9):
            assert len(store.find_by_uid("a.csv", f"S1_U{i}")) == 1
        assert sum(r.inserted for r in results) == 9
        assert sum(r.updated for r in results) == 3
        assert sum(r.failed for r in results) == 0

    def test_batch_finishes_before_next_batch_starts(self):
        store = RecordingStore()
        units = [_unit(f"S1_U{i}") for i in range(6)]

        result = UpsertEngine(store, max_workers=4, batch_size=2).upsert(units, "a.csv")

        assert result.inserted == 6
        batch_of = {f"S1_U{i}": i // 2 for i in range(6)}
        events = store.events
        for batch in range(2):
            last_end = max(
                i for i, (kind, uid) in enumerate(events)
                if kind == "end" and batch_of[uid] == batch
            )
            first_start = min(
                i for i, (kind, uid) in enumerate(events)
                if kind == "start" and batch_of[uid] == batch + 1
            )
            assert last_end < first_start
        assert store.max_active <= 2


class TestRebuild:
    def test_delete_then_insert_all(self, store):
        engine = UpsertEngine(store, batch_size=2)
        engine.upsert([_unit("S1_A"), _unit("S1_B")], "a.csv")

        assert engine.delete_existing("a.csv") == 2
        assert engine.insert_all([_unit("S1_A"), _unit("S1_A"), _unit(None)], "a.csv") == 3
        assert store.count("a.csv") == 3

    def test_insert_failure_raises_store_error(self, store):
        class BrokenStore(InMemoryVectorStore):
            def insert_many(self, records):
                raise ConnectionError("connection lost")

        with pytest.raises(StoreError, match="connection lost"):
            UpsertEngine(BrokenStore()).insert_all([_unit("S1_A")], "a.csv")


class TestStats:
    def test_counts(self, store):
        engine = UpsertEngine(store)
        engine.upsert([_unit("S1_A"), _unit("S1_B"), _unit(None, content="no uid")], "a.csv")
        engine.upsert([_unit("S1_A")], "a.csv")

        stats = engine.stats("a.csv")

        assert stats.total_documents == 3
        assert stats.with_uid == 2
        assert stats.recently_updated == 1

    def test_unreadable_store_returns_none(self):
        class BrokenStore(InMemoryVectorStore):
            def fetch_all(self, source=None):
                raise ConnectionError("down")

        assert UpsertEngine(BrokenStore()).stats() is None
