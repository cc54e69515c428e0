# tests/fakes.py
"""Deterministic stand-ins for provider clients."""

from __future__ import annotations

import hashlib
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from vacancy_rag.llm.chat import ChatResponse


class FakeEmbedder:
    """
    Deterministic embedder.

    Texts listed in `fixed` get that vector; everything else gets a unit
    vector seeded from the text's sha256, so equal texts embed equally.
    """

    def __init__(self, dimensions: int = 8, fixed: Optional[Dict[str, List[float]]] = None):
        self.dimensions = dimensions
        self.fixed = dict(fixed or {})
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        if text in self.fixed:
            return list(self.fixed[text])
        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:4], "big")
        vec = np.random.default_rng(seed).normal(size=self.dimensions)
        return (vec / np.linalg.norm(vec)).tolist()

    def embed(self, text: str) -> List[float]:
        self.calls.append([text])
        return self._vector(text)

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]


class FailingEmbedder:
    def embed(self, text: str) -> List[float]:
        raise RuntimeError("embedding service unavailable")

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        raise RuntimeError("embedding service unavailable")



class ScriptedChatClient:
    """Returns queued responses in order and records every request."""

    def __init__(self, responses: Sequence[ChatResponse]):
        self.responses = list(responses)
        self.requests: List[Dict[str, Any]] = []

    def chat(self, messages, tools=None) -> ChatResponse:
        self.requests.append({"messages": [dict(m) for m in messages], "tools": tools})
        if not self.responses:
            raise AssertionError("no scripted response left")
        return self.responses.pop(0)
