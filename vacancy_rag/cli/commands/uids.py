# vacancy_rag/cli/commands/uids.py
"""
Check UID derivation without touching the store.

Usage:
    vacancy-rag check-uids               # built-in derivation checks
    vacancy-rag check-uids units.csv     # per-file UID report
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from vacancy_rag.cli.context import CLIState, handle_errors, load_app_settings, setup
from vacancy_rag.cli.ui import ui
from vacancy_rag.ingestion.csv_reader import read_csv
from vacancy_rag.uid import annotate_rows, derive_property_code, derive_uid, is_valid_uid

PROPERTY_CODE_CASES = [
    ("S0002 - 101 Maple", "S0002"),
    ("S0020 - Oak Plaza", "S0020"),
    ("P1234 - Downtown Center", "P1234"),
    ("A001 - Riverside", "A001"),
]

UID_CASES = [
    ("S0002 - 101 Maple", "D2", "S0002_D2"),
    ("S0020 - Oak Plaza", "1N", "S0020_1N"),
    ("S0020 - Oak Plaza", "1 S", "S0020_1S"),
    ("P1234 - Downtown", "A101", "P1234_A101"),
]

VALIDATION_CASES = [
    ("S0002_D2", True),
    ("S0020_1N", True),
    ("INVALID", False),
    ("0002_D2", False),
    ("S0002-D2", False),
]


def run_self_check() -> bool:
    """Print each built-in case; True when all pass."""
    ok = True

    ui.section("Property code extraction")
    for label, expected in PROPERTY_CODE_CASES:
        result = derive_property_code(label)
        ui.status(f"{label!r} -> {result!r}", result == expected, f"expected {expected!r}")
        ok &= result == expected

    ui.section("UID generation")
    for prop, unit, expected in UID_CASES:
        result = derive_uid(prop, unit)
        ui.status(
            f"{prop!r} + {unit!r} -> {result!r}", result == expected, f"expected {expected!r}"
        )
        ok &= result == expected

    ui.section("UID validation")
    for candidate, expected in VALIDATION_CASES:
        result = is_valid_uid(candidate)
        ui.status(f"{candidate!r} -> {result}", result == expected, f"expected {expected}")
        ok &= result == expected

    return ok


def report_file(state: CLIState, file: Path) -> None:
    settings = load_app_settings(state)
    cols = settings.columns

    rows = read_csv(file)
    result = annotate_rows(
        rows,
        property_column=cols.property_column,
        unit_column=cols.unit_column,
        uid_column=cols.uid_column,
        strict=settings.ingest.strict_uids,
    )

    ui.table(
        ["#", cols.property_column, cols.unit_column, cols.uid_column],
        [
            (
                i,
                row.get(cols.property_column),
                row.get(cols.unit_column),
                row[cols.uid_column] or "FAILED",
            )
            for i, row in enumerate(result.rows[:5], start=1)
        ],
        title=f"Sample of {file.name}",
    )

    total = result.total
    pct = (result.success_count / total * 100) if total else 0.0
    unique = len(set(result.uids()))
    duplicates = result.duplicate_uids()

    lines = [
        f"Total rows:      {total}",
        f"Successful UIDs: {result.success_count} ({pct:.1f}%)",
        f"Failed UIDs:     {result.fail_count}",
        f"Unique UIDs:     {unique}",
    ]
    style = "yellow" if duplicates else "green"
    ui.summary_panel("\n".join(lines), title="UID summary", style=style)

    if duplicates:
        ui.warning(f"{len(duplicates)} UIDs appear more than once:")
        for uid, count in sorted(duplicates.items())[:10]:
            ui.info(f"  {uid} x{count}")

    for index in result.failed_indices[:10]:
        row = result.rows[index]
        ui.warning(
            f"Row {index + 1}: {cols.property_column}={row.get(cols.property_column)!r}, "
            f"{cols.unit_column}={row.get(cols.unit_column)!r}"
        )


def command(state: CLIState, file: Optional[Path] = None) -> None:
    setup(state)
    ui.header("UID check", str(file) if file else "built-in cases")

    ok = run_self_check()
    if not ok:
        ui.error("UID derivation self-check failed")
        raise typer.Exit(code=1)

    if file is not None:
        with handle_errors():
            report_file(state, file)
