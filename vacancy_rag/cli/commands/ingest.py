# vacancy_rag/cli/commands/ingest.py
"""
Ingest a CSV file.

Usage:
    vacancy-rag ingest units.csv                 # UID upsert
    vacancy-rag ingest units.csv --clear         # delete source, rebuild
    vacancy-rag ingest units.csv --force         # ignore the file-hash check
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from vacancy_rag.cli.context import CLIState, handle_errors, open_runtime, setup
from vacancy_rag.cli.ui import ui
from vacancy_rag.ingestion.jobs import IngestionJob
from vacancy_rag.ingestion.pipeline import IngestResult


def _show_result(result: IngestResult, job: Optional[IngestionJob] = None) -> None:
    if result.skipped:
        ui.warning(f"Skipped {result.source}: {result.message}. Use --force to re-ingest.")
        return

    lines = [
        f"Source:        {result.source}",
        f"Rows:          {result.total_rows}",
        f"With UID:      {result.rows_with_uid}",
        f"Without UID:   {result.rows_without_uid}",
        f"Inserted:      {result.inserted}",
        f"Updated:       {result.updated}",
        f"Failed:        {result.failed}",
    ]
    if result.deleted:
        lines.append(f"Deleted:       {result.deleted}")
    if job is not None:
        lines.append(f"Job:           {job.id} ({job.status.value})")
    elif result.job_id:
        lines.append(f"Job:           {result.job_id}")

    style = "yellow" if result.failed else "green"
    ui.summary_panel("\n".join(lines), title="Ingestion complete", style=style)

    for detail in result.error_details[:10]:
        ui.warning(detail)


def command(
    state: CLIState,
    file: Path,
    source: Optional[str] = None,
    clear: Optional[bool] = None,
    force: bool = False,
    track: bool = True,
) -> None:
    setup(state)
    ui.header("Ingest", str(file))

    with handle_errors():
        runtime = open_runtime(state, track_jobs=track)
        try:
            result = runtime.pipeline.ingest_file(
                file,
                source=source,
                clear_existing=clear,
                track_job=track,
                force=force,
            )
            job = runtime.job_tracker.get_job(result.job_id) if result.job_id else None
        finally:
            runtime.close()

    _show_result(result, job)
