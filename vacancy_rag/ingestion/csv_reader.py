# vacancy_rag/ingestion/csv_reader.py
"""
CSV reading for unit exports.

Rows come back as dicts keyed by the header row, values trimmed, blank
lines skipped and a UTF-8 BOM stripped. Short rows are padded with empty
strings; extra trailing cells are dropped.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

from vacancy_rag.core.exceptions import IngestionError
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import INGEST

logger = get_logger(__name__)

RawRow = Dict[str, str]

DEFAULT_REQUIRED_COLUMNS = ("Property Name", "Unit")


def _parse(text: str, origin: str) -> List[RawRow]:
    reader = csv.reader(io.StringIO(text))
    try:
        records = [r for r in reader if any(cell.strip() for cell in r)]
    except csv.Error as e:
        raise IngestionError(f"Failed to parse CSV {origin}: {e}") from e

    if not records:
        return []

    columns = [c.strip() for c in records[0]]
    if not any(columns):
        raise IngestionError(f"No headers found in {origin}")

    rows: List[RawRow] = []
    for record in records[1:]:
        cells = [c.strip() for c in record[: len(columns)]]
        cells.extend([""] * (len(columns) - len(cells)))
        rows.append(dict(zip(columns, cells)))

    logger.info(f"{INGEST} Parsed {len(rows)} rows from {origin}")
    return rows


def read_csv_bytes(content: bytes, origin: str = "<bytes>") -> List[RawRow]:
    """
    Parse CSV content held in memory (e.g. an email attachment).

    Raises:
        IngestionError: If the content isn't parseable CSV
    """
    # utf-8-sig drops the BOM spreadsheet exports like to add
    text = content.decode("utf-8-sig", errors="replace")
    return _parse(text, origin)


def read_csv(path: Union[str, Path]) -> List[RawRow]:
    """
    Read a CSV file into rows.

    Raises:
        FileNotFoundError: If the file doesn't exist
        IngestionError: If the file isn't parseable CSV
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"CSV file not found: {p}")

    return read_csv_bytes(p.read_bytes(), origin=p.name)


@dataclass
class RowIssue:
    """A row missing one or more required values."""

    row_number: int
    missing: List[str]

    def __str__(self) -> str:
        return f"Row {self.row_number}: missing {', '.join(self.missing)}"


def validate_rows(
    rows: Sequence[RawRow],
    required_columns: Sequence[str] = DEFAULT_REQUIRED_COLUMNS,
) -> List[RowIssue]:
    """
    Report rows whose required columns are absent or blank.

    Report-only: rows are never rejected here. Rows without a property or
    unit label fail UID derivation later and are counted there.

    Returns:
        One RowIssue per offending row (1-based row numbers)
    """
    issues: List[RowIssue] = []
    for index, row in enumerate(rows):
        missing = [c for c in required_columns if not str(row.get(c) or "").strip()]
        if missing:
            issues.append(RowIssue(row_number=index + 1, missing=missing))

    if issues:
        logger.warning(f"{INGEST} {len(issues)} rows have missing required values")
        for issue in issues[:10]:
            logger.warning(f"{INGEST}   {issue}")
        if len(issues) > 10:
            logger.warning(f"{INGEST}   ...and {len(issues) - 10} more")

    return issues


__all__ = ["RawRow", "RowIssue", "read_csv", "read_csv_bytes", "validate_rows"]
