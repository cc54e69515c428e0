# vacancy_rag/ingestion/__init__.py
"""
CSV ingestion: reading, UID-keyed units, embedding, upsert and job tracking.

Usage:
    from vacancy_rag.ingestion import IngestionPipeline

    pipeline = IngestionPipeline(store, embedder)
    result = pipeline.ingest_file("units.csv")
"""

from vacancy_rag.ingestion.csv_reader import read_csv, read_csv_bytes, validate_rows
from vacancy_rag.ingestion.embedding import EmbeddedUnit, embed_units
from vacancy_rag.ingestion.jobs import (
    IngestionJob,
    InMemoryJobRepository,
    JobStatus,
    JobTracker,
    NullJobTracker,
    RepositoryJobTracker,
)
from vacancy_rag.ingestion.pipeline import IngestionPipeline, IngestResult
from vacancy_rag.ingestion.units import TextUnit, build_units, rows_to_units, split_text
from vacancy_rag.ingestion.upsert import UpsertEngine, UpsertResult, UpsertStats

__all__ = [
    "EmbeddedUnit",
    "IngestResult",
    "IngestionJob",
    "IngestionPipeline",
    "InMemoryJobRepository",
    "JobStatus",
    "JobTracker",
    "NullJobTracker",
    "RepositoryJobTracker",
    "TextUnit",
    "UpsertEngine",
    "UpsertResult",
    "UpsertStats",
    "build_units",
    "embed_units",
    "read_csv",
    "read_csv_bytes",
    "rows_to_units",
    "split_text",
    "validate_rows",
]
