# vacancy_rag/retrieval/retriever.py
"""
Similarity retrieval over stored units.

Usage:
    retriever = Retriever(store, embedder, top_k=5, similarity_threshold=0.7)
    result = retriever.retrieve_for_rag("Which units are vacant at Oak Plaza?")
    if result.has_results:
        print(result.context)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from vacancy_rag.llm.embedding import Embedder
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import RETRIEVER
from vacancy_rag.vector_db.base import VectorStore

logger = get_logger(__name__)

PREVIEW_LENGTH = 150
CONTEXT_SEPARATOR = "\n\n---\n\n"


@dataclass
class RetrievedDocument:
    id: str
    content: str
    metadata: Dict[str, Any]
    source: Optional[str]
    similarity: float
    rank: int


@dataclass
class SourceReference:
    source: Optional[str]
    similarity: float
    metadata: Dict[str, Any]
    content_preview: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "similarity": self.similarity,
            "metadata": self.metadata,
            "content_preview": self.content_preview,
        }


@dataclass
class RetrievalResult:
    has_results: bool
    documents: List[RetrievedDocument] = field(default_factory=list)
    context: str = ""
    sources: List[SourceReference] = field(default_factory=list)


def build_context(documents: Sequence[RetrievedDocument]) -> str:
    """
    Render documents as numbered blocks for the prompt.

    Each block is "[Document n] (Similarity: 87.3%)" followed by the
    content; blocks are separated by a "---" line.
    """
    parts = [
        f"[Document {i}] (Similarity: {doc.similarity * 100:.1f}%)\n{doc.content}"
        for i, doc in enumerate(documents, start=1)
    ]
    return CONTEXT_SEPARATOR.join(parts)


def extract_sources(documents: Sequence[RetrievedDocument]) -> List[SourceReference]:
    """One reference per distinct (source, metadata), first hit wins."""
    seen = set()
    sources: List[SourceReference] = []

    for doc in documents:
        key = (doc.source, json.dumps(doc.metadata, sort_keys=True, default=str))
        if key in seen:
            continue
        seen.add(key)
        sources.append(
            SourceReference(
                source=doc.source,
                similarity=doc.similarity,
                metadata=doc.metadata,
                content_preview=doc.content[:PREVIEW_LENGTH] + "...",
            )
        )

    return sources


class Retriever:
    """Embeds a query and searches the store."""

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        top_k: int = 5,
        similarity_threshold: float = 0.7,
    ):
        self.store = store
        self.embedder = embedder
        self.top_k = top_k
        self.similarity_threshold = similarity_threshold

    def retrieve(
        self,
        query: str,
        source: Optional[str] = None,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> List[RetrievedDocument]:
        """
        Return the top matches above the similarity threshold, best first.

        Embedding and store errors propagate.
        """
        if similarity_threshold is None:
            similarity_threshold = self.similarity_threshold

        query_embedding = self.embedder.embed(query)

        hits = self.store.search(
            query_embedding,
            limit=top_k or self.top_k,
            threshold=similarity_threshold,
            source=source,
        )

        logger.info(f"{RETRIEVER} Found {len(hits)} documents for query: {query[:80]!r}")

        return [
            RetrievedDocument(
                id=hit.id,
                content=hit.content,
                metadata=hit.metadata,
                source=hit.source,
                similarity=hit.similarity,
                rank=rank,
            )
            for rank, hit in enumerate(hits, start=1)
        ]

    def retrieve_for_rag(self, query: str, source: Optional[str] = None) -> RetrievalResult:
        documents = self.retrieve(query, source=source)
        if not documents:
            return RetrievalResult(has_results=False)

        return RetrievalResult(
            has_results=True,
            documents=documents,
            context=build_context(documents),
            sources=extract_sources(documents),
        )


__all__ = [
    "Retriever",
    "RetrievalResult",
    "RetrievedDocument",
    "SourceReference",
    "build_context",
    "extract_sources",
]
