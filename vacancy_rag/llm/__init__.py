# vacancy_rag/llm/__init__.py
"""Embedding and chat providers."""

from vacancy_rag.llm.chat import ChatClient, ChatResponse, OpenAIChatClient, ToolCall
from vacancy_rag.llm.credentials import CredentialError, resolve_api_key
from vacancy_rag.llm.embedding import Embedder, OpenAIEmbeddingClient

__all__ = [
    "ChatClient",
    "ChatResponse",
    "CredentialError",
    "Embedder",
    "OpenAIChatClient",
    "OpenAIEmbeddingClient",
    "ToolCall",
    "resolve_api_key",
]
