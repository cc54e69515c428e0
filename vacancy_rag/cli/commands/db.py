# vacancy_rag/cli/commands/db.py
"""
Database commands.

Usage:
    vacancy-rag init-db                   # create tables, indexes, trigger
    vacancy-rag stats                     # document and upsert statistics
    vacancy-rag stats --source units.csv
    vacancy-rag stats --jobs 5            # show the five latest ingestion jobs
"""

from __future__ import annotations

from typing import Optional

from vacancy_rag.cli.context import CLIState, handle_errors, load_app_settings, open_runtime, setup
from vacancy_rag.cli.ui import ui
from vacancy_rag.core.exceptions import ConfigurationError, StoreError
from vacancy_rag.storage.postgres import PostgresConnectionManager


def init_db(state: CLIState) -> None:
    setup(state)

    with handle_errors():
        settings = load_app_settings(state)
        if state.memory:
            raise ConfigurationError("init-db needs a PostgreSQL database; drop --memory")

        manager = PostgresConnectionManager(settings.storage)
        try:
            manager.start()
            healthy, message = manager.is_healthy()
            if not healthy:
                raise StoreError(message)
            manager.ensure_schema()
        finally:
            manager.stop()

    ui.success(
        f"Schema ready: {settings.storage.units_table}, {settings.storage.jobs_table}"
    )


def stats(state: CLIState, source: Optional[str] = None, jobs: int = 10) -> None:
    setup(state)

    with handle_errors():
        runtime = open_runtime(state)
        try:
            source_stats = runtime.pipeline.stats(source)
            upsert_stats = runtime.engine.stats(source)
            recent = runtime.job_tracker.recent_jobs(jobs) if jobs > 0 else []
        finally:
            runtime.close()

    lines = [
        f"Scope:             {source or 'all'}",
        f"Total documents:   {source_stats.total_documents}",
    ]
    if upsert_stats is not None:
        lines.append(f"With UID:          {upsert_stats.with_uid}")
        lines.append(f"Updated in place:  {upsert_stats.recently_updated}")
    ui.summary_panel("\n".join(lines), title="Statistics", style="blue")

    if source_stats.sources:
        ui.table(["Source"], [(s,) for s in source_stats.sources])

    if recent:
        ui.table(
            ["Job", "File", "Status", "Processed", "Started"],
            [
                (
                    j.id[:8],
                    j.file_name,
                    j.status.value,
                    f"{j.processed_chunks}/{j.total_chunks}",
                    j.started_at.strftime("%Y-%m-%d %H:%M") if j.started_at else None,
                )
                for j in recent
            ],
            title="Recent jobs",
        )
