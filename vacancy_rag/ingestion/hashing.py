# vacancy_rag/ingestion/hashing.py
"""
Content hashing for ingestion idempotency.

The pipeline hashes the raw CSV bytes before parsing. A hash that already
belongs to a completed ingestion job means the export was seen before, so
the run is skipped unless forced. Renaming a file does not change its hash.
"""

from __future__ import annotations

import hashlib

HASH_PREFIX = "sha256:"


def compute_bytes_hash(data: bytes) -> str:
    """
    Hash CSV content for the ingestion_jobs.file_hash column.

    Examples:
        >>> compute_bytes_hash(b"")
        'sha256:e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    return f"{HASH_PREFIX}{hashlib.sha256(data).hexdigest()}"


__all__ = ["compute_bytes_hash", "HASH_PREFIX"]
