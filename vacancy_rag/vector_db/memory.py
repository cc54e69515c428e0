# vacancy_rag/vector_db/memory.py
"""
In-process vector store.

Brute-force cosine similarity over numpy arrays. Meant for local runs,
the CLI's --memory backend and tests; nothing is persisted.
"""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import VECTOR_DB
from vacancy_rag.vector_db.base import SearchResult, StoredUnit, UnitRecord

logger = get_logger(__name__)

_TICK = timedelta(microseconds=1)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryVectorStore:
    """
    Thread-safe dict-backed VectorStore.

    Usage:
        store = InMemoryVectorStore()
        record_id = store.insert(UnitRecord(content="...", embedding=[...], source="a.csv"))
        hits = store.search(query_vector, limit=5, threshold=0.7)
    """

    def __init__(self) -> None:
        self._units: Dict[str, StoredUnit] = {}
        self._lock = threading.RLock()

    def insert(self, record: UnitRecord) -> str:
        record_id = str(uuid.uuid4())
        now = _now()
        unit = StoredUnit(
            id=record_id,
            content=record.content,
            embedding=list(record.embedding),
            metadata=copy.deepcopy(record.metadata),
            source=record.source,
            chunk_index=record.chunk_index,
            uid=record.uid,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._units[record_id] = unit
        return record_id

    def insert_many(self, records: Sequence[UnitRecord]) -> int:
        with self._lock:
            for record in records:
                self.insert(record)
        return len(records)

    def update(
        self,
        record_id: str,
        *,
        content: str,
        embedding: List[float],
        metadata: Dict[str, Any],
        uid: Optional[str],
    ) -> None:
        with self._lock:
            unit = self._units.get(record_id)
            if unit is None:
                raise KeyError(f"Unknown record id: {record_id}")

            unit.content = content
            unit.embedding = list(embedding)
            unit.metadata = copy.deepcopy(metadata)
            unit.uid = uid
            # Strictly after created_at even on coarse clocks
            unit.updated_at = max(_now(), unit.created_at + _TICK)

    def find_by_uid(self, source: str, uid: str) -> List[StoredUnit]:
        with self._lock:
            # dict order is insertion order, so the stable sort keeps
            # same-timestamp records oldest first
            matches = [u for u in self._units.values() if u.source == source and u.uid == uid]
            return [copy.deepcopy(u) for u in sorted(matches, key=lambda u: u.created_at)]

    def delete_by_source(self, source: str) -> int:
        with self._lock:
            doomed = [rid for rid, u in self._units.items() if u.source == source]
            for rid in doomed:
                del self._units[rid]

        logger.debug(f"{VECTOR_DB} Deleted {len(doomed)} records for source '{source}'")
        return len(doomed)

    def search(
        self,
        query_embedding: List[float],
        *,
        limit: int,
        threshold: float,
        source: Optional[str] = None,
    ) -> List[SearchResult]:
        with self._lock:
            candidates = [
                u for u in self._units.values() if source is None or u.source == source
            ]

        if not candidates:
            return []

        matrix = np.asarray([u.embedding for u in candidates], dtype=np.float64)
        query = np.asarray(query_embedding, dtype=np.float64)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        norms[norms == 0] = 1.0
        scores = (matrix @ query) / norms

        order = np.argsort(-scores, kind="stable")
        results: List[SearchResult] = []
        for idx in order:
            score = float(scores[idx])
            if score <= threshold:
                break
            unit = candidates[idx]
            results.append(
                SearchResult(
                    id=unit.id,
                    content=unit.content,
                    metadata=copy.deepcopy(unit.metadata),
                    source=unit.source,
                    similarity=score,
                )
            )
            if len(results) >= limit:
                break

        return results

    def count(self, source: Optional[str] = None) -> int:
        with self._lock:
            if source is None:
                return len(self._units)
            return sum(1 for u in self._units.values() if u.source == source)

    def list_sources(self) -> List[str]:
        with self._lock:
            return sorted({u.source for u in self._units.values() if u.source is not None})

    def fetch_all(self, source: Optional[str] = None) -> List[StoredUnit]:
        with self._lock:
            return [
                copy.deepcopy(u)
                for u in self._units.values()
                if source is None or u.source == source
            ]


__all__ = ["InMemoryVectorStore"]
