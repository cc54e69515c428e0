# vacancy_rag/ingestion/units.py
"""
Turn annotated rows into text units ready for embedding.

Two shapes:
- build_units(): upsert mode. One unit per row that has a UID; rows are
  unit records, so they are never split.
- rows_to_units(): destroy-and-rebuild mode. Every row with usable text,
  split into overlapping fixed-size chunks when it's long.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from vacancy_rag.ingestion.text import (
    DEFAULT_EXCLUDE_KEYS,
    FIELD_SEPARATOR,
    clean_text,
    format_field,
    is_valid_text,
    row_to_text,
)
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import INGEST

logger = get_logger(__name__)


@dataclass
class TextUnit:
    """One embeddable piece of a row."""

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    uid: Optional[str] = None

    @property
    def chunk_index(self) -> int:
        return int(self.metadata.get("chunk_index", 0))


def build_units(
    annotated_rows: Sequence[Mapping[str, Any]],
    uid_column: str = "UID",
) -> List[TextUnit]:
    """
    Build one unit per row with a UID.

    Content is "column: value | ..." over every column except the UID
    column, cleaned. Metadata is the full annotated row (UID included)
    plus chunk_index=0 and parent_doc_index, the row's position among
    the kept rows.
    """
    units: List[TextUnit] = []

    for row in annotated_rows:
        uid = row.get(uid_column)
        if not uid:
            continue

        content = clean_text(
            FIELD_SEPARATOR.join(format_field(k, v) for k, v in row.items() if k != uid_column)
        )
        metadata = {**row, "chunk_index": 0, "parent_doc_index": len(units)}
        units.append(TextUnit(content=content, metadata=metadata, uid=uid))

    skipped = len(annotated_rows) - len(units)
    logger.info(f"{INGEST} Built {len(units)} units ({skipped} rows without UID skipped)")
    return units


def split_text(text: str, chunk_size: int = 1000, chunk_overlap: int = 200) -> List[str]:
    """
    Split text into fixed-size character chunks with overlap.

    Tiny trailing pieces already covered by the previous overlap are
    dropped.

    Raises:
        ValueError: If chunk_size < 1 or overlap is not in [0, chunk_size)
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})")

    if not text or not text.strip():
        return []

    if len(text) <= chunk_size:
        return [text.strip()]

    pieces: List[str] = []
    step = chunk_size - chunk_overlap
    pos = 0
    while pos < len(text):
        piece = text[pos : pos + chunk_size].strip()
        if piece and (not pieces or len(piece) > chunk_overlap):
            pieces.append(piece)
        pos += step

    return pieces


def rows_to_units(
    rows: Sequence[Mapping[str, Any]],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    uid_column: str = "UID",
) -> List[TextUnit]:
    """
    Build units for destroy-and-rebuild ingestion.

    Rows whose text fails is_valid_text() are skipped. Metadata keeps the
    row's columns plus row_index (position in the input), chunk_index and
    parent_doc_index (position among kept rows).
    """
    units: List[TextUnit] = []
    kept = 0

    for row_index, row in enumerate(rows):
        text = clean_text(row_to_text(row, exclude_keys=(*DEFAULT_EXCLUDE_KEYS, uid_column)))
        if not is_valid_text(text):
            logger.warning(f"{INGEST} Skipping row {row_index}: not enough text")
            continue

        uid = row.get(uid_column) or None
        for chunk_index, piece in enumerate(split_text(text, chunk_size, chunk_overlap)):
            metadata = {
                **row,
                "row_index": row_index,
                "chunk_index": chunk_index,
                "parent_doc_index": kept,
            }
            units.append(TextUnit(content=piece, metadata=metadata, uid=uid))
        kept += 1

    logger.info(f"{INGEST} Created {len(units)} units from {kept} of {len(rows)} rows")
    return units


__all__ = ["TextUnit", "build_units", "split_text", "rows_to_units"]
