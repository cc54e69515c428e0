# vacancy_rag/vector_db/pgvector.py
"""
pgvector-backed vector store.

Works against the units table created by vacancy_rag.storage.schema
(Supabase-compatible). Cosine similarity is computed as
1 - (embedding <=> query), matching the match_documents() function the
table was originally queried through.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from psycopg.types.json import Json

from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import VECTOR_DB
from vacancy_rag.storage.postgres import PostgresConnectionManager
from vacancy_rag.vector_db.base import SearchResult, StoredUnit, UnitRecord

logger = get_logger(__name__)

UNIT_COLUMNS = (
    "id, content, embedding, metadata, source, chunk_index, uid, created_at, updated_at"
)


def _vector(values: Sequence[float]) -> np.ndarray:
    # pgvector's psycopg adapter dumps float32 ndarrays as vector
    return np.asarray(values, dtype=np.float32)


def _row_to_unit(row: Sequence[Any]) -> StoredUnit:
    embedding = row[2]
    if embedding is None:
        embedding = []
    elif hasattr(embedding, "tolist"):
        embedding = embedding.tolist()

    return StoredUnit(
        id=str(row[0]),
        content=row[1],
        embedding=list(embedding),
        metadata=dict(row[3]) if row[3] else {},
        source=row[4],
        chunk_index=row[5] if row[5] is not None else 0,
        uid=row[6],
        created_at=row[7],
        updated_at=row[8],
    )


class PgVectorStore:
    """
    VectorStore over PostgreSQL + pgvector.

    Usage:
        manager = PostgresConnectionManager(StorageConfig(connection_string=url))
        store = PgVectorStore(manager)

        record = UnitRecord(content="...", embedding=vec, source="a.csv", uid="S1_A")
        record_id = store.insert(record)
        hits = store.search(query_vec, limit=5, threshold=0.7)
    """

    def __init__(self, manager: PostgresConnectionManager, table: Optional[str] = None):
        self._manager = manager
        self._table = table or manager.config.units_table

    @property
    def table(self) -> str:
        return self._table

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, record: UnitRecord) -> str:
        with self._manager.connection() as conn:
            row = conn.execute(
                f"""
                INSERT INTO {self._table}
                    (content, embedding, metadata, source, chunk_index, uid)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING id
                """,
                (
                    record.content,
                    _vector(record.embedding),
                    Json(record.metadata),
                    record.source,
                    record.chunk_index,
                    record.uid,
                ),
            ).fetchone()
            conn.commit()

        return str(row[0])

    def insert_many(self, records: Sequence[UnitRecord]) -> int:
        if not records:
            return 0

        with self._manager.connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    f"""
                    INSERT INTO {self._table}
                        (content, embedding, metadata, source, chunk_index, uid)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    [
                        (
                            r.content,
                            _vector(r.embedding),
                            Json(r.metadata),
                            r.source,
                            r.chunk_index,
                            r.uid,
                        )
                        for r in records
                    ],
                )
            conn.commit()

        logger.debug(f"{VECTOR_DB} Inserted {len(records)} records into '{self._table}'")
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
        with self._manager.connection() as conn:
            conn.execute(
                f"""
                UPDATE {self._table}
                SET content = %s, embedding = %s, metadata = %s, uid = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (content, _vector(embedding), Json(metadata), uid, record_id),
            )
            conn.commit()

    def delete_by_source(self, source: str) -> int:
        with self._manager.connection() as conn:
            cursor = conn.execute(f"DELETE FROM {self._table} WHERE source = %s", (source,))
            deleted = cursor.rowcount
            conn.commit()

        logger.info(f"{VECTOR_DB} Deleted {deleted} records for source '{source}'")
        return deleted

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_uid(self, source: str, uid: str) -> List[StoredUnit]:
        with self._manager.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT {UNIT_COLUMNS} FROM {self._table}
                WHERE source = %s AND uid = %s
                ORDER BY created_at, id
                """,
                (source, uid),
            ).fetchall()

        return [_row_to_unit(row) for row in rows]

    def search(
        self,
        query_embedding: List[float],
        *,
        limit: int,
        threshold: float,
        source: Optional[str] = None,
    ) -> List[SearchResult]:
        """
        Cosine similarity search.

        Only hits with similarity strictly above the threshold are kept,
        ordered by similarity (highest first).
        """
        query = _vector(query_embedding)

        source_clause = ""
        params: List[Any] = [query, query, threshold]
        if source is not None:
            source_clause = "AND source = %s"
            params.append(source)
        params.extend([query, limit])

        with self._manager.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT id, content, metadata, source, 1 - (embedding <=> %s) AS similarity
                FROM {self._table}
                WHERE 1 - (embedding <=> %s) > %s {source_clause}
                ORDER BY embedding <=> %s
                LIMIT %s
                """,
                params,
            ).fetchall()

        return [
            SearchResult(
                id=str(row[0]),
                content=row[1],
                metadata=dict(row[2]) if row[2] else {},
                source=row[3],
                similarity=float(row[4]) if row[4] is not None else 0.0,
            )
            for row in rows
        ]

    def count(self, source: Optional[str] = None) -> int:
        with self._manager.connection() as conn:
            if source is None:
                row = conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
            else:
                row = conn.execute(
                    f"SELECT COUNT(*) FROM {self._table} WHERE source = %s", (source,)
                ).fetchone()

        return int(row[0]) if row else 0

    def list_sources(self) -> List[str]:
        with self._manager.connection() as conn:
            rows = conn.execute(
                f"SELECT DISTINCT source FROM {self._table} "
                f"WHERE source IS NOT NULL ORDER BY source"
            ).fetchall()

        return [row[0] for row in rows]

    def fetch_all(self, source: Optional[str] = None) -> List[StoredUnit]:
        with self._manager.connection() as conn:
            if source is None:
                rows = conn.execute(
                    f"SELECT {UNIT_COLUMNS} FROM {self._table} ORDER BY created_at, id"
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {UNIT_COLUMNS} FROM {self._table} "
                    f"WHERE source = %s ORDER BY created_at, id",
                    (source,),
                ).fetchall()

        return [_row_to_unit(row) for row in rows]


__all__ = ["PgVectorStore"]
