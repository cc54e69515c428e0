# vacancy_rag/core/exceptions.py
"""
Core exceptions for vacancy_rag.

Partial failures (a row without a derivable UID, a single failed upsert,
a job-tracking hiccup) are counted and logged, never raised. The classes
below are reserved for failures that end a whole run.
"""


class VacancyRagError(Exception):
    """
    Base exception for all vacancy_rag errors.

    Examples:
        >>> try:
        ...     pipeline.ingest_file("units.csv")
        ... except VacancyRagError as e:
        ...     print(f"Ingestion failed: {e}")
    """

    pass


class ConfigurationError(VacancyRagError):
    """
    Missing or invalid configuration.

    Raised at startup, before any row is processed, for example:
    - Missing database connection string
    - Missing provider API key
    - Missing email credentials for polling
    """

    pass


class IngestionError(VacancyRagError):
    """
    Unrecoverable ingestion failure.

    The pipeline marks the tracked job as failed before re-raising.
    """

    pass


class EmbeddingError(IngestionError):
    """
    Embedding provider failure.

    A failed embedding batch is terminal for the current run; retries
    happen inside the provider client, not in the pipeline.
    """

    pass


class StoreError(IngestionError):
    """
    Vector store failure on a bulk operation.

    Raised by destroy-and-rebuild ingestion (delete by source, bulk
    insert). Per-unit upserts never raise this; they count failures.
    """

    pass


class SourceError(VacancyRagError):
    """Attachment source failure (connection, login, mailbox selection)."""

    pass
