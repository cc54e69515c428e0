# vacancy_rag/ingestion/embedding.py
"""
Batch embedding of text units.

Batches run strictly one after another. A failed batch ends the run:
retries belong to the provider client, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from vacancy_rag.core.exceptions import EmbeddingError
from vacancy_rag.ingestion.units import TextUnit
from vacancy_rag.llm.embedding import Embedder
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import EMBEDDING

logger = get_logger(__name__)

DEFAULT_EMBED_BATCH_SIZE = 50
MAX_EMBED_BATCH_SIZE = 100


@dataclass
class EmbeddedUnit:
    """A TextUnit with its vector."""

    content: str
    metadata: Dict[str, Any]
    uid: Optional[str]
    embedding: List[float]

    @property
    def chunk_index(self) -> int:
        return int(self.metadata.get("chunk_index", 0))


def embed_units(
    units: Sequence[TextUnit],
    embedder: Embedder,
    batch_size: int = DEFAULT_EMBED_BATCH_SIZE,
) -> List[EmbeddedUnit]:
    """
    Embed units in order.

    Args:
        units: Units to embed
        embedder: Provider with embed_batch()
        batch_size: Texts per provider call (1..100)

    Returns:
        One EmbeddedUnit per input unit, same order

    Raises:
        ValueError: If batch_size is out of range
        EmbeddingError: If a batch fails or returns the wrong number of vectors
    """
    if not 1 <= batch_size <= MAX_EMBED_BATCH_SIZE:
        raise ValueError(f"batch_size must be in 1..{MAX_EMBED_BATCH_SIZE}, got {batch_size}")

    if not units:
        return []

    logger.info(f"{EMBEDDING} Generating embeddings for {len(units)} units")

    embedded: List[EmbeddedUnit] = []
    for start in range(0, len(units), batch_size):
        batch = units[start : start + batch_size]
        end = start + len(batch)

        try:
            vectors = embedder.embed_batch([u.content for u in batch])
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding failed for units {start + 1}-{end}: {e}") from e

        if len(vectors) != len(batch):
            raise EmbeddingError(
                f"Embedding provider returned {len(vectors)} vectors for {len(batch)} texts"
            )

        for unit, vector in zip(batch, vectors):
            embedded.append(
                EmbeddedUnit(
                    content=unit.content,
                    metadata=unit.metadata,
                    uid=unit.uid,
                    embedding=list(vector),
                )
            )

        logger.debug(f"{EMBEDDING} Embedded units {start + 1}-{end} of {len(units)}")

    return embedded


__all__ = ["EmbeddedUnit", "embed_units", "DEFAULT_EMBED_BATCH_SIZE", "MAX_EMBED_BATCH_SIZE"]
