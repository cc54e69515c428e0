# vacancy_rag/vector_db/__init__.py
"""
Vector stores for embedded units.

Backends:
- PgVectorStore: PostgreSQL + pgvector (production)
- InMemoryVectorStore: numpy cosine similarity (local runs, tests)
"""

from vacancy_rag.vector_db.base import SearchResult, StoredUnit, UnitRecord, VectorStore
from vacancy_rag.vector_db.memory import InMemoryVectorStore

__all__ = [
    "SearchResult",
    "StoredUnit",
    "UnitRecord",
    "VectorStore",
    "InMemoryVectorStore",
]
