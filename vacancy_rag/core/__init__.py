# vacancy_rag/core/__init__.py
from vacancy_rag.core.exceptions import (
    ConfigurationError,
    EmbeddingError,
    IngestionError,
    SourceError,
    StoreError,
    VacancyRagError,
)

__all__ = [
    "VacancyRagError",
    "ConfigurationError",
    "IngestionError",
    "EmbeddingError",
    "StoreError",
    "SourceError",
]
