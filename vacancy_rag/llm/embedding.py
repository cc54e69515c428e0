# vacancy_rag/llm/embedding.py
"""
OpenAI embedding client.

Transient provider errors are retried by the openai SDK itself
(max_retries); anything that still fails surfaces as EmbeddingError.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

from openai import OpenAI

from vacancy_rag.core.exceptions import EmbeddingError
from vacancy_rag.llm.credentials import resolve_api_key
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import EMBEDDING

logger = get_logger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Anything that turns texts into vectors, in input order."""

    def embed(self, text: str) -> List[float]: ...

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]: ...


class OpenAIEmbeddingClient:
    """
    Embedding client for the OpenAI API.

    Required:
        - OPENAI_API_KEY environment variable OR api_key parameter

    Config example:
        embedding:
          model: text-embedding-3-small
          max_retries: 2
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "text-embedding-3-small",
        dimensions: Optional[int] = None,
        base_url: Optional[str] = None,
        max_retries: int = 2,
        timeout: float = 30.0,
    ) -> None:
        key = resolve_api_key(provider="openai", api_key=api_key)

        self.model = model
        self.dimensions = dimensions

        client_kwargs: dict[str, Any] = {
            "api_key": key,
            "max_retries": max_retries,
            "timeout": timeout,
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)

    def _request(self, inputs: Any) -> Any:
        kwargs: dict[str, Any] = {"input": inputs, "model": self.model}
        if self.dimensions is not None:
            kwargs["dimensions"] = self.dimensions
        return self._client.embeddings.create(**kwargs)

    def embed(self, text: str) -> List[float]:
        try:
            response = self._request(text)
            return list(response.data[0].embedding)
        except Exception as exc:
            raise EmbeddingError(f"Failed to embed text: {text[:50]!r}...") from exc

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed several texts in one request.

        The API may return items out of order; they are re-sorted by index.
        """
        if not texts:
            return []

        try:
            response = self._request(list(texts))
        except Exception as exc:
            raise EmbeddingError(f"Failed to embed batch of {len(texts)} texts") from exc

        items = sorted(response.data, key=lambda d: d.index)
        logger.debug(f"{EMBEDDING} Embedded {len(items)} texts with {self.model}")
        return [list(item.embedding) for item in items]


__all__ = ["Embedder", "OpenAIEmbeddingClient"]
