# vacancy_rag/ingestion/pipeline.py
"""
CSV ingestion orchestration.

Flow:
    rows -> annotate (UIDs) -> units -> embed -> upsert | rebuild -> store

Two modes:
- clear_existing=False (default): UID upsert. Re-ingesting a file updates
  records in place, so the store holds one record per (source, UID).
- clear_existing=True: destroy-and-rebuild. All records of the source are
  deleted, then every row with usable text is chunked and inserted.

Usage:
    pipeline = IngestionPipeline(store, embedder, job_tracker=tracker)
    result = pipeline.ingest_file("units.csv")
    print(result)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from vacancy_rag.config.schema import ColumnSettings, IngestSettings
from vacancy_rag.core.exceptions import IngestionError
from vacancy_rag.ingestion.csv_reader import read_csv_bytes, validate_rows
from vacancy_rag.ingestion.embedding import embed_units
from vacancy_rag.ingestion.hashing import compute_bytes_hash
from vacancy_rag.ingestion.jobs import JobStatus, JobTracker, NullJobTracker
from vacancy_rag.ingestion.units import build_units, rows_to_units
from vacancy_rag.ingestion.upsert import UpsertEngine
from vacancy_rag.llm.embedding import Embedder
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import INGEST
from vacancy_rag.uid.annotator import annotate_rows
from vacancy_rag.vector_db.base import VectorStore

logger = get_logger(__name__)


@dataclass
class IngestResult:
    """Summary of one ingestion run."""

    source: str
    total_rows: int = 0
    rows_with_uid: int = 0
    rows_without_uid: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0
    deleted: int = 0
    job_id: Optional[str] = None
    file_hash: Optional[str] = None
    skipped: bool = False
    message: str = ""
    error_details: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.inserted + self.updated

    def __str__(self) -> str:
        if self.skipped:
            return f"{self.source}: skipped ({self.message})"
        return (
            f"{self.source}: rows {self.total_rows}, with UID {self.rows_with_uid}, "
            f"inserted {self.inserted}, updated {self.updated}, failed {self.failed}, "
            f"deleted {self.deleted}"
        )


@dataclass
class SourceStats:
    total_documents: int
    sources: List[str]


class IngestionPipeline:
    """
    Runs CSV rows through UID annotation, embedding and storage.

    Collaborators are injected; nothing is created from globals.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        job_tracker: Optional[JobTracker] = None,
        engine: Optional[UpsertEngine] = None,
        settings: Optional[IngestSettings] = None,
        columns: Optional[ColumnSettings] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.job_tracker = job_tracker or NullJobTracker()
        self.settings = settings or IngestSettings()
        self.columns = columns or ColumnSettings()
        self.engine = engine or UpsertEngine(
            store,
            max_workers=self.settings.max_workers,
            batch_size=self.settings.upsert_batch_size,
            max_retries=self.settings.max_retries,
            retry_backoff=self.settings.retry_backoff,
        )

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def ingest_file(
        self,
        path: Union[str, Path],
        source: Optional[str] = None,
        clear_existing: Optional[bool] = None,
        track_job: bool = True,
        force: bool = False,
    ) -> IngestResult:
        """
        Ingest a CSV file.

        Args:
            path: CSV file
            source: Source identifier (defaults to the file name)
            clear_existing: Rebuild mode; defaults to settings.clear_existing
            track_job: Record an ingestion job and skip already-ingested files
            force: Ingest even if a completed job has the same file hash

        Raises:
            FileNotFoundError: If the file doesn't exist
            IngestionError: If the run fails
        """
        p = Path(path)
        if not p.is_file():
            raise FileNotFoundError(f"CSV file not found: {p}")

        return self.ingest_bytes(
            p.read_bytes(),
            file_name=p.name,
            source=source,
            clear_existing=clear_existing,
            track_job=track_job,
            force=force,
        )

    def ingest_bytes(
        self,
        content: bytes,
        file_name: str,
        source: Optional[str] = None,
        clear_existing: Optional[bool] = None,
        track_job: bool = True,
        force: bool = False,
    ) -> IngestResult:
        """Ingest CSV content held in memory, e.g. an email attachment."""
        source = source or file_name
        file_hash = compute_bytes_hash(content)
        logger.info(f"{INGEST} Starting ingestion for {file_name} ({file_hash})")

        if track_job and not force and self.job_tracker.was_already_processed(file_hash):
            logger.info(f"{INGEST} Skipping {file_name}: already processed (use force to override)")
            return IngestResult(
                source=source,
                file_hash=file_hash,
                skipped=True,
                message="File already processed",
            )

        rows = read_csv_bytes(content, origin=file_name)
        return self.ingest_rows(
            rows,
            source=source,
            file_name=file_name,
            file_hash=file_hash,
            clear_existing=clear_existing,
            track_job=track_job,
        )

    def ingest_rows(
        self,
        rows: Sequence[Mapping[str, Any]],
        source: str,
        file_name: Optional[str] = None,
        file_hash: Optional[str] = None,
        clear_existing: Optional[bool] = None,
        track_job: bool = True,
    ) -> IngestResult:
        """
        Ingest already-parsed rows.

        Raises:
            IngestionError: If there are no rows, a rebuild has no units, or a
                step fails unrecoverably (the job is marked failed first).
                Rows without a UID in upsert mode are counted, not raised.
        """
        if not rows:
            raise IngestionError(f"No rows to ingest for source '{source}'")

        if clear_existing is None:
            clear_existing = self.settings.clear_existing

        cols = self.columns
        validate_rows(rows, required_columns=(cols.property_column, cols.unit_column))

        annotation = annotate_rows(
            rows,
            property_column=cols.property_column,
            unit_column=cols.unit_column,
            uid_column=cols.uid_column,
            strict=self.settings.strict_uids,
        )

        if clear_existing:
            units = rows_to_units(
                annotation.rows,
                chunk_size=self.settings.chunk_size,
                chunk_overlap=self.settings.chunk_overlap,
                uid_column=cols.uid_column,
            )
        else:
            units = build_units(annotation.rows, uid_column=cols.uid_column)

        result = IngestResult(
            source=source,
            total_rows=annotation.total,
            rows_with_uid=annotation.success_count,
            rows_without_uid=annotation.fail_count,
            file_hash=file_hash,
        )

        if not units:
            if clear_existing:
                # a rebuild with nothing to insert would only wipe the source
                raise IngestionError(f"No valid units created from '{source}'")
            logger.warning(
                f"{INGEST} No row in '{source}' has a derivable UID; nothing to upsert"
            )

        tracker = self.job_tracker if track_job else NullJobTracker()
        job = tracker.create_job(file_name or source, len(units), file_hash)
        result.job_id = job.id if job else None

        try:
            if clear_existing:
                result.deleted = self.engine.delete_existing(source)
                embedded = embed_units(units, self.embedder, self.settings.embed_batch_size)
                result.inserted = self.engine.insert_all(embedded, source)
            else:
                embedded = embed_units(units, self.embedder, self.settings.embed_batch_size)
                upserted = self.engine.upsert(embedded, source)
                result.inserted = upserted.inserted
                result.updated = upserted.updated
                result.failed = upserted.failed
                result.error_details = upserted.error_details
        except Exception as e:
            logger.error(f"{INGEST} Ingestion failed for '{source}': {e}")
            tracker.update_job(result.job_id, JobStatus.FAILED, 0, str(e))
            if isinstance(e, IngestionError):
                raise
            raise IngestionError(f"Ingestion failed for '{source}': {e}") from e

        tracker.update_job(result.job_id, JobStatus.COMPLETED, result.processed)

        result.message = "Ingestion completed"
        logger.info(f"{INGEST} {result}")
        return result

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def stats(self, source: Optional[str] = None) -> SourceStats:
        return SourceStats(
            total_documents=self.store.count(source),
            sources=self.store.list_sources(),
        )


__all__ = ["IngestionPipeline", "IngestResult", "SourceStats"]
