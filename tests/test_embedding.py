# tests/test_embedding.py
"""Tests for batch unit embedding."""

from __future__ import annotations

import pytest

from vacancy_rag.core.exceptions import EmbeddingError
from vacancy_rag.ingestion.embedding import embed_units
from vacancy_rag.ingestion.units import TextUnit

from .fakes import FailingEmbedder, FakeEmbedder


def _units(n):
    return [TextUnit(content=f"Unit: U{i} | Status: Vacant", uid=f"S0001_U{i}") for i in range(n)]


class TestEmbedUnits:
    def test_preserves_order_and_fields(self, embedder):
        units = _units(3)
        embedded = embed_units(units, embedder)

        assert [e.uid for e in embedded] == ["S0001_U0", "S0001_U1", "S0001_U2"]
        assert embedded[1].content == units[1].content
        assert embedded[1].embedding == embedder.embed(units[1].content)

    def test_batches_sequentially(self):
        embedder = FakeEmbedder()
        embed_units(_units(5), embedder, batch_size=2)

        assert [len(call) for call in embedder.calls] == [2, 2, 1]

    def test_empty_input_makes_no_calls(self, embedder):
        assert embed_units([], embedder) == []
        assert embedder.calls == []

    @pytest.mark.parametrize("batch_size", [0, 101])
    def test_batch_size_bounds(self, embedder, batch_size):
        with pytest.raises(ValueError):
            embed_units(_units(1), embedder, batch_size=batch_size)

    def test_provider_failure_is_wrapped(self):
        with pytest.raises(EmbeddingError, match="units 1-1"):
            embed_units(_units(1), FailingEmbedder())

    def test_vector_count_mismatch(self):
        class ShortEmbedder(FakeEmbedder):
            def embed_batch(self, texts):
                return super().embed_batch(texts)[:-1]

        with pytest.raises(EmbeddingError, match="returned 1 vectors for 2 texts"):
            embed_units(_units(2), ShortEmbedder())
