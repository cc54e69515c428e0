# vacancy_rag/ingestion/jobs.py
"""
Ingestion job tracking.

Job tracking is best-effort: a failure to record a job never fails the
ingestion it describes. RepositoryJobTracker logs and swallows every
repository error; NullJobTracker records nothing.

Repositories:
- InMemoryJobRepository: process-local (tests, --memory runs)
- PostgresJobRepository: the ingestion_jobs table
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Protocol, runtime_checkable

from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import JOBS
from vacancy_rag.storage.postgres import PostgresConnectionManager

logger = get_logger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass
class IngestionJob:
    """One tracked ingestion run."""

    id: str
    file_name: str
    status: JobStatus
    total_chunks: int = 0
    processed_chunks: int = 0
    error_message: Optional[str] = None
    file_hash: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Repositories
# =============================================================================


class JobRepository(Protocol):
    """Raw job persistence. Errors propagate; the tracker absorbs them."""

    def create(self, file_name: str, total_chunks: int, file_hash: Optional[str]) -> IngestionJob: ...

    def update(
        self,
        job_id: str,
        status: JobStatus,
        processed_chunks: int,
        error_message: Optional[str],
        completed_at: Optional[datetime],
    ) -> None: ...

    def has_completed_hash(self, file_hash: str) -> bool: ...

    def get(self, job_id: str) -> Optional[IngestionJob]: ...

    def recent(self, limit: int = 10) -> List[IngestionJob]: ...


class InMemoryJobRepository:
    def __init__(self) -> None:
        self._jobs: Dict[str, IngestionJob] = {}
        self._lock = threading.Lock()

    def create(self, file_name: str, total_chunks: int, file_hash: Optional[str]) -> IngestionJob:
        job = IngestionJob(
            id=str(uuid.uuid4()),
            file_name=file_name,
            status=JobStatus.PROCESSING,
            total_chunks=total_chunks,
            file_hash=file_hash,
            started_at=_now(),
        )
        with self._lock:
            self._jobs[job.id] = job
        return replace(job)

    def update(
        self,
        job_id: str,
        status: JobStatus,
        processed_chunks: int,
        error_message: Optional[str],
        completed_at: Optional[datetime],
    ) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise KeyError(f"Unknown job id: {job_id}")
            job.status = status
            job.processed_chunks = processed_chunks
            if error_message:
                job.error_message = error_message
            if completed_at is not None:
                job.completed_at = completed_at

    def has_completed_hash(self, file_hash: str) -> bool:
        with self._lock:
            return any(
                j.file_hash == file_hash and j.status == JobStatus.COMPLETED
                for j in self._jobs.values()
            )

    def get(self, job_id: str) -> Optional[IngestionJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job) if job else None

    def recent(self, limit: int = 10) -> List[IngestionJob]:
        with self._lock:
            jobs = list(self._jobs.values())
        return [replace(j) for j in reversed(jobs[-limit:])]


class PostgresJobRepository:
    """Job records in the ingestion_jobs table."""

    COLUMNS = (
        "id, file_name, status, total_chunks, processed_chunks, "
        "error_message, file_hash, started_at, completed_at"
    )

    def __init__(self, manager: PostgresConnectionManager, table: Optional[str] = None):
        self._manager = manager
        self._table = table or manager.config.jobs_table

    @staticmethod
    def _row_to_job(row) -> IngestionJob:
        return IngestionJob(
            id=str(row[0]),
            file_name=row[1],
            status=JobStatus(row[2]),
            total_chunks=row[3] or 0,
            processed_chunks=row[4] or 0,
            error_message=row[5],
            file_hash=row[6],
            started_at=row[7],
            completed_at=row[8],
        )

    def create(self, file_name: str, total_chunks: int, file_hash: Optional[str]) -> IngestionJob:
        with self._manager.connection() as conn:
            row = conn.execute(
                f"""
                INSERT INTO {self._table}
                    (file_name, status, total_chunks, processed_chunks, file_hash)
                VALUES (%s, %s, %s, 0, %s)
                RETURNING {self.COLUMNS}
                """,
                (file_name, JobStatus.PROCESSING.value, total_chunks, file_hash),
            ).fetchone()
            conn.commit()
        return self._row_to_job(row)

    def update(
        self,
        job_id: str,
        status: JobStatus,
        processed_chunks: int,
        error_message: Optional[str],
        completed_at: Optional[datetime],
    ) -> None:
        with self._manager.connection() as conn:
            conn.execute(
                f"""
                UPDATE {self._table}
                SET status = %s,
                    processed_chunks = %s,
                    error_message = COALESCE(%s, error_message),
                    completed_at = COALESCE(%s, completed_at)
                WHERE id = %s
                """,
                (status.value, processed_chunks, error_message, completed_at, job_id),
            )
            conn.commit()

    def has_completed_hash(self, file_hash: str) -> bool:
        with self._manager.connection() as conn:
            row = conn.execute(
                f"SELECT 1 FROM {self._table} WHERE file_hash = %s AND status = %s LIMIT 1",
                (file_hash, JobStatus.COMPLETED.value),
            ).fetchone()
        return row is not None

    def get(self, job_id: str) -> Optional[IngestionJob]:
        with self._manager.connection() as conn:
            row = conn.execute(
                f"SELECT {self.COLUMNS} FROM {self._table} WHERE id = %s", (job_id,)
            ).fetchone()
        return self._row_to_job(row) if row else None

    def recent(self, limit: int = 10) -> List[IngestionJob]:
        with self._manager.connection() as conn:
            rows = conn.execute(
                f"SELECT {self.COLUMNS} FROM {self._table} ORDER BY started_at DESC LIMIT %s",
                (limit,),
            ).fetchall()
        return [self._row_to_job(r) for r in rows]


# =============================================================================
# Trackers
# =============================================================================


@runtime_checkable
class JobTracker(Protocol):
    """What the pipeline needs from job tracking."""

    def create_job(
        self, file_name: str, total_chunks: int, file_hash: Optional[str] = None
    ) -> Optional[IngestionJob]: ...

    def update_job(
        self,
        job_id: Optional[str],
        status: JobStatus,
        processed_chunks: int = 0,
        error_message: Optional[str] = None,
    ) -> None: ...

    def was_already_processed(self, file_hash: str) -> bool: ...

    def get_job(self, job_id: str) -> Optional[IngestionJob]: ...

    def recent_jobs(self, limit: int = 10) -> List[IngestionJob]: ...


class NullJobTracker:
    """Tracks nothing. Used when job tracking is disabled."""

    def create_job(
        self, file_name: str, total_chunks: int, file_hash: Optional[str] = None
    ) -> Optional[IngestionJob]:
        return None

    def update_job(
        self,
        job_id: Optional[str],
        status: JobStatus,
        processed_chunks: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        return None

    def was_already_processed(self, file_hash: str) -> bool:
        return False

    def get_job(self, job_id: str) -> Optional[IngestionJob]:
        return None

    def recent_jobs(self, limit: int = 10) -> List[IngestionJob]:
        return []


class RepositoryJobTracker:
    """
    Best-effort tracker over a JobRepository.

    Every repository error is logged at WARNING and swallowed:
    create_job() and get_job() return None, update_job() does nothing,
    recent_jobs() returns an empty list and was_already_processed()
    answers False.
    """

    def __init__(self, repository: JobRepository):
        self.repository = repository

    def create_job(
        self, file_name: str, total_chunks: int, file_hash: Optional[str] = None
    ) -> Optional[IngestionJob]:
        try:
            job = self.repository.create(file_name, total_chunks, file_hash)
        except Exception as e:
            logger.warning(f"{JOBS} Could not create ingestion job for {file_name}: {e}")
            return None

        logger.debug(f"{JOBS} Created job {job.id} for {file_name} ({total_chunks} units)")
        return job

    def update_job(
        self,
        job_id: Optional[str],
        status: JobStatus,
        processed_chunks: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        if job_id is None:
            return

        status = JobStatus(status)
        completed_at = _now() if status.is_terminal else None
        try:
            self.repository.update(job_id, status, processed_chunks, error_message, completed_at)
        except Exception as e:
            logger.warning(f"{JOBS} Could not update job {job_id} to {status.value}: {e}")
            return

        logger.debug(f"{JOBS} Job {job_id} -> {status.value} ({processed_chunks} processed)")

    def was_already_processed(self, file_hash: str) -> bool:
        try:
            return self.repository.has_completed_hash(file_hash)
        except Exception as e:
            logger.warning(f"{JOBS} Could not check file hash {file_hash}: {e}")
            return False

    def get_job(self, job_id: str) -> Optional[IngestionJob]:
        try:
            return self.repository.get(job_id)
        except Exception as e:
            logger.warning(f"{JOBS} Could not load job {job_id}: {e}")
            return None

    def recent_jobs(self, limit: int = 10) -> List[IngestionJob]:
        try:
            return self.repository.recent(limit)
        except Exception as e:
            logger.warning(f"{JOBS} Could not list recent jobs: {e}")
            return []


__all__ = [
    "JobStatus",
    "IngestionJob",
    "JobRepository",
    "InMemoryJobRepository",
    "PostgresJobRepository",
    "JobTracker",
    "NullJobTracker",
    "RepositoryJobTracker",
]
