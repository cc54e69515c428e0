# vacancy_rag/ingestion/upsert.py
"""
UID-keyed upsert of embedded units.

For each unit:
- no UID            -> insert
- UID, no match     -> insert
- UID, one match    -> update content, embedding, metadata, uid, updated_at
- UID, several      -> update the oldest match and warn; duplicates stay

A failed unit is logged and counted; the run continues.

Concurrency:
- Units go to the store in batches; batch N finishes before batch N+1.
- Inside a batch up to max_workers lookups/writes are in flight.
- Units sharing a UID run sequentially on one worker, so a UID repeated
  in one file resolves as insert-then-update.
- Upserts for the same source are serialised within the process. Separate
  processes can still race between lookup and write.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vacancy_rag.core.exceptions import StoreError
from vacancy_rag.ingestion.embedding import EmbeddedUnit
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import UPSERT
from vacancy_rag.vector_db.base import UnitRecord, VectorStore

logger = get_logger(__name__)

MAX_BACKOFF_SECONDS = 10.0

INSERTED = "inserted"
UPDATED = "updated"


@dataclass
class UpsertResult:
    """Outcome counts of one upsert call."""

    inserted: int = 0
    updated: int = 0
    failed: int = 0
    error_details: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.failed

    @property
    def succeeded(self) -> int:
        return self.inserted + self.updated

    def __str__(self) -> str:
        return f"inserted {self.inserted}, updated {self.updated}, failed {self.failed}"


@dataclass
class UpsertStats:
    """Store-side view of what upserts have produced."""

    total_documents: int
    with_uid: int
    recently_updated: int


def _to_record(unit: EmbeddedUnit, source: str, position: int) -> UnitRecord:
    return UnitRecord(
        content=unit.content,
        embedding=unit.embedding,
        metadata=unit.metadata,
        source=source,
        chunk_index=position,
        uid=unit.uid,
    )


class UpsertEngine:
    """
    Writes embedded units to a VectorStore with UID conflict resolution.

    Usage:
        engine = UpsertEngine(store, max_workers=4, batch_size=100)
        result = engine.upsert(embedded_units, source="units.csv")
        print(result)  # inserted 2, updated 1, failed 0
    """

    def __init__(
        self,
        store: VectorStore,
        max_workers: int = 4,
        batch_size: int = 100,
        max_retries: int = 0,
        retry_backoff: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")

        self.store = store
        self.max_workers = max_workers
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._sleep = sleep

        self._source_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _source_lock(self, source: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._source_locks.get(source)
            if lock is None:
                lock = self._source_locks[source] = threading.Lock()
            return lock

    # -------------------------------------------------------------------------
    # Upsert
    # -------------------------------------------------------------------------

    def upsert(self, units: Sequence[EmbeddedUnit], source: str) -> UpsertResult:
        """
        Insert or update every unit for a source.

        Args:
            units: Embedded units (UID optional)
            source: Source identifier (usually the file name)

        Returns:
            UpsertResult; inserted + updated + failed == len(units)
        """
        result = UpsertResult()
        if not units:
            return result

        records = [_to_record(u, source, i) for i, u in enumerate(units)]
        logger.info(f"{UPSERT} Upserting {len(records)} units for source '{source}'")

        with self._source_lock(source):
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                for start in range(0, len(records), self.batch_size):
                    batch = records[start : start + self.batch_size]
                    groups = self._group_by_uid(batch)
                    futures = [
                        executor.submit(self._upsert_group, group, source) for group in groups
                    ]
                    for future in futures:
                        for outcome, error in future.result():
                            if outcome == INSERTED:
                                result.inserted += 1
                            elif outcome == UPDATED:
                                result.updated += 1
                            else:
                                result.failed += 1
                                result.error_details.append(error)

        logger.info(f"{UPSERT} Upsert summary for '{source}': {result}")
        return result

    @staticmethod
    def _group_by_uid(batch: Sequence[UnitRecord]) -> List[List[UnitRecord]]:
        """Group a batch so units sharing a UID stay together, in order."""
        groups: "OrderedDict[object, List[UnitRecord]]" = OrderedDict()
        for index, record in enumerate(batch):
            # UID-less units are independent of each other
            key: object = record.uid if record.uid else ("no-uid", index)
            groups.setdefault(key, []).append(record)
        return list(groups.values())

    def _upsert_group(
        self, group: Sequence[UnitRecord], source: str
    ) -> List[Tuple[str, Optional[str]]]:
        outcomes: List[Tuple[str, Optional[str]]] = []
        for record in group:
            try:
                outcomes.append((self._with_retry(record, source), None))
            except Exception as e:
                logger.error(f"{UPSERT} Error upserting unit with UID {record.uid}: {e}")
                outcomes.append(("failed", f"{record.uid}: {e}"))
        return outcomes

    def _with_retry(self, record: UnitRecord, source: str) -> str:
        attempt = 0
        while True:
            try:
                return self._upsert_one(record, source)
            except Exception as e:
                if attempt >= self.max_retries:
                    raise
                delay = min(self.retry_backoff * (2**attempt), MAX_BACKOFF_SECONDS)
                attempt += 1
                logger.warning(
                    f"{UPSERT} Retry {attempt}/{self.max_retries} for UID {record.uid} "
                    f"in {delay:.2f}s: {e}"
                )
                self._sleep(delay)

    def _upsert_one(self, record: UnitRecord, source: str) -> str:
        if not record.uid:
            self.store.insert(record)
            return INSERTED

        matches = self.store.find_by_uid(source, record.uid)
        if not matches:
            self.store.insert(record)
            return INSERTED

        if len(matches) > 1:
            logger.warning(
                f"{UPSERT} {len(matches)} records share UID {record.uid} in '{source}'; "
                f"updating the oldest ({matches[0].id})"
            )

        self.store.update(
            matches[0].id,
            content=record.content,
            embedding=record.embedding,
            metadata=record.metadata,
            uid=record.uid,
        )
        return UPDATED

    # -------------------------------------------------------------------------
    # Destroy-and-rebuild
    # -------------------------------------------------------------------------

    def delete_existing(self, source: str) -> int:
        """
        Delete every record for a source.

        Store errors propagate: a rebuild must not continue after a failed
        delete.
        """
        with self._source_lock(source):
            deleted = self.store.delete_by_source(source)

        logger.info(f"{UPSERT} Deleted {deleted} existing records for '{source}'")
        return deleted

    def insert_all(self, units: Sequence[EmbeddedUnit], source: str) -> int:
        """
        Insert units without UID matching, in batches of batch_size.

        Raises:
            StoreError: If a batch fails; earlier batches stay written
        """
        records = [_to_record(u, source, i) for i, u in enumerate(units)]
        inserted = 0

        with self._source_lock(source):
            for start in range(0, len(records), self.batch_size):
                batch = records[start : start + self.batch_size]
                try:
                    inserted += self.store.insert_many(batch)
                except Exception as e:
                    raise StoreError(
                        f"Insert failed for units {start + 1}-{start + len(batch)} "
                        f"of '{source}': {e}"
                    ) from e
                logger.debug(f"{UPSERT} Inserted batch {start + 1}-{start + len(batch)}")

        logger.info(f"{UPSERT} Inserted {inserted} records for '{source}'")
        return inserted

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def stats(self, source: Optional[str] = None) -> Optional[UpsertStats]:
        """
        Count stored records, records with a UID, and records updated
        since creation. Returns None if the store can't be read.
        """
        try:
            units = self.store.fetch_all(source)
        except Exception as e:
            logger.error(f"{UPSERT} Error fetching upsert stats: {e}")
            return None

        return UpsertStats(
            total_documents=len(units),
            with_uid=sum(1 for u in units if u.uid),
            recently_updated=sum(1 for u in units if u.was_updated),
        )


__all__ = ["UpsertEngine", "UpsertResult", "UpsertStats", "MAX_BACKOFF_SECONDS"]
