# vacancy_rag/retrieval/__init__.py
"""Similarity retrieval and context building."""

from vacancy_rag.retrieval.retriever import (
    RetrievalResult,
    RetrievedDocument,
    Retriever,
    SourceReference,
    build_context,
    extract_sources,
)

__all__ = [
    "RetrievalResult",
    "RetrievedDocument",
    "Retriever",
    "SourceReference",
    "build_context",
    "extract_sources",
]
