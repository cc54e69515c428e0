# vacancy_rag/config/__init__.py
from vacancy_rag.config.schema import (
    AppSettings,
    ChatSettings,
    ColumnSettings,
    EmailSettings,
    EmbeddingSettings,
    IngestSettings,
    RetrievalSettings,
    load_settings,
)

__all__ = [
    "AppSettings",
    "ChatSettings",
    "ColumnSettings",
    "EmailSettings",
    "EmbeddingSettings",
    "IngestSettings",
    "RetrievalSettings",
    "load_settings",
]
