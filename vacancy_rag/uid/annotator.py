# vacancy_rag/uid/annotator.py
"""
Batch UID annotation for raw CSV rows.

annotate_rows() never drops or reorders rows: row position is later used
as ordinal metadata (parent_doc_index), and rows whose UID can't be
derived are still returned (with a None UID) so callers can report on
them. Filtering happens downstream, before embedding.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import UID
from vacancy_rag.uid.deriver import derive_uid, is_valid_uid

logger = get_logger(__name__)

DEFAULT_PROPERTY_COLUMN = "Property Name"
DEFAULT_UNIT_COLUMN = "Unit"
DEFAULT_UID_COLUMN = "UID"

AnnotatedRow = Dict[str, Any]


@dataclass
class AnnotationResult:
    """Annotated rows plus per-row success/failure accounting."""

    rows: List[AnnotatedRow]
    success_count: int = 0
    fail_count: int = 0
    failed_indices: List[int] = field(default_factory=list)
    uid_column: str = DEFAULT_UID_COLUMN

    @property
    def total(self) -> int:
        return len(self.rows)

    def uids(self) -> List[str]:
        """Derived UIDs in row order, skipping failures."""
        return [row[self.uid_column] for row in self.rows if row.get(self.uid_column)]

    def duplicate_uids(self) -> Dict[str, int]:
        """UIDs that occur more than once in this batch, with their counts."""
        counts = Counter(self.uids())
        return {uid: n for uid, n in counts.items() if n > 1}

    def failed_rows(self) -> List[AnnotatedRow]:
        return [self.rows[i] for i in self.failed_indices]


def annotate_rows(
    rows: Sequence[Mapping[str, Any]],
    property_column: str = DEFAULT_PROPERTY_COLUMN,
    unit_column: str = DEFAULT_UNIT_COLUMN,
    uid_column: str = DEFAULT_UID_COLUMN,
    strict: bool = False,
) -> AnnotationResult:
    """
    Derive a UID for every row, preserving input order.

    Args:
        rows: Raw rows (column name -> value)
        property_column: Column holding the property label
        unit_column: Column holding the unit label
        uid_column: Column the UID is written to
        strict: Also reject derived UIDs that fail is_valid_uid()

    Returns:
        AnnotationResult with one output row per input row. Input rows
        are not mutated.
    """
    annotated: List[AnnotatedRow] = []
    failed_indices: List[int] = []

    for index, row in enumerate(rows):
        property_label = row.get(property_column)
        unit_label = row.get(unit_column)

        uid: Optional[str] = derive_uid(property_label, unit_label)

        if uid is not None and strict and not is_valid_uid(uid):
            logger.warning(f"{UID} Row {index + 1}: derived UID {uid!r} fails validation")
            uid = None

        if uid is None:
            failed_indices.append(index)
            logger.warning(
                f"{UID} Row {index + 1}: failed to generate UID for "
                f"property={property_label!r}, unit={unit_label!r}"
            )

        annotated.append({**row, uid_column: uid})

    result = AnnotationResult(
        rows=annotated,
        success_count=len(annotated) - len(failed_indices),
        fail_count=len(failed_indices),
        failed_indices=failed_indices,
        uid_column=uid_column,
    )

    logger.info(
        f"{UID} UID generation: {result.success_count} generated, "
        f"{result.fail_count} failed, {result.total} total"
    )

    duplicates = result.duplicate_uids()
    if duplicates:
        extra = sum(n - 1 for n in duplicates.values())
        logger.warning(f"{UID} {extra} duplicate UIDs in batch: {sorted(duplicates)[:10]}")

    return result


__all__ = [
    "AnnotatedRow",
    "AnnotationResult",
    "annotate_rows",
    "DEFAULT_PROPERTY_COLUMN",
    "DEFAULT_UNIT_COLUMN",
    "DEFAULT_UID_COLUMN",
]
