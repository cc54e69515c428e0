# vacancy_rag/vector_db/base.py
"""
Vector store contract.

Records are written as UnitRecord and read back as StoredUnit. The store
does not enforce (source, uid) uniqueness; the upsert engine does, through
find_by_uid() followed by insert() or update().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

# =============================================================================
# Records
# =============================================================================


@dataclass
class UnitRecord:
    """A unit ready to be written: content, vector and row metadata."""

    content: str
    embedding: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None
    chunk_index: int = 0
    uid: Optional[str] = None


@dataclass
class StoredUnit:
    """A persisted unit as read back from the store."""

    id: str
    content: str
    embedding: List[float]
    metadata: Dict[str, Any]
    source: Optional[str]
    chunk_index: int
    uid: Optional[str]
    created_at: datetime
    updated_at: datetime

    @property
    def was_updated(self) -> bool:
        return self.updated_at > self.created_at


@dataclass
class SearchResult:
    """A similarity search hit."""

    id: str
    content: str
    metadata: Dict[str, Any]
    source: Optional[str]
    similarity: float


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class VectorStore(Protocol):
    """
    Storage backend for embedded units.

    find_by_uid() must return matches oldest first (created_at, then id);
    the upsert engine updates the first one when duplicates exist.
    """

    def insert(self, record: UnitRecord) -> str: ...

    def insert_many(self, records: Sequence[UnitRecord]) -> int: ...

    def update(
        self,
        record_id: str,
        *,
        content: str,
        embedding: List[float],
        metadata: Dict[str, Any],
        uid: Optional[str],
    ) -> None: ...

    def find_by_uid(self, source: str, uid: str) -> List[StoredUnit]: ...

    def delete_by_source(self, source: str) -> int: ...

    def search(
        self,
        query_embedding: List[float],
        *,
        limit: int,
        threshold: float,
        source: Optional[str] = None,
    ) -> List[SearchResult]: ...

    def count(self, source: Optional[str] = None) -> int: ...

    def list_sources(self) -> List[str]: ...

    def fetch_all(self, source: Optional[str] = None) -> List[StoredUnit]: ...


__all__ = ["UnitRecord", "StoredUnit", "SearchResult", "VectorStore"]
