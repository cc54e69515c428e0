# vacancy_rag/cli/cli.py
"""
vacancy-rag CLI - Main application.

Commands:
    vacancy-rag ingest       Ingest a CSV file (UID upsert or rebuild)
    vacancy-rag check-uids   Check UID derivation, optionally on a file
    vacancy-rag ask          Ask a question about ingested data
    vacancy-rag poll         Poll the mailbox for CSV attachments
    vacancy-rag stats        Document and upsert statistics
    vacancy-rag init-db      Create tables, indexes and triggers

NOTE: Commands use lazy loading - heavy imports only happen when a command is invoked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from vacancy_rag.cli.context import CLIState, get_state

app = typer.Typer(
    name="vacancy-rag",
    help="vacancy-rag - CSV vacancy data in pgvector, queried by a retrieval agent.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
    memory: bool = typer.Option(
        False, "--memory", help="Use a process-local store instead of PostgreSQL."
    ),
) -> None:
    ctx.obj = CLIState(config_path=config, verbose=verbose, memory=memory)


# =============================================================================
# LAZY COMMANDS
# =============================================================================


@app.command("ingest")
def ingest(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="CSV file to ingest."),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Source name (default: file name)."),
    clear: Optional[bool] = typer.Option(
        None, "--clear/--upsert", help="Delete the source and rebuild, or upsert by UID."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Ingest even if already processed."),
    no_track: bool = typer.Option(False, "--no-track", help="Don't record an ingestion job."),
) -> None:
    """Ingest a CSV file."""
    from vacancy_rag.cli.commands import ingest as mod

    mod.command(get_state(ctx), file=file, source=source, clear=clear, force=force, track=not no_track)


@app.command("check-uids")
def check_uids(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(None, help="CSV file to report on."),
) -> None:
    """Check UID derivation."""
    from vacancy_rag.cli.commands import uids as mod

    mod.command(get_state(ctx), file=file)


@app.command("ask")
def ask(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question about the ingested data."),
    simple: bool = typer.Option(False, "--simple", help="Single retrieval, no tool loop."),
) -> None:
    """Ask a question."""
    from vacancy_rag.cli.commands import ask as mod

    mod.command(get_state(ctx), question=question, simple=simple)


@app.command("poll")
def poll(
    ctx: typer.Context,
    once: bool = typer.Option(False, "--once", help="Run a single poll cycle."),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Seconds between polls."),
) -> None:
    """Poll the mailbox for CSV attachments."""
    from vacancy_rag.cli.commands import poll as mod

    mod.command(get_state(ctx), once=once, interval=interval)


@app.command("stats")
def stats(
    ctx: typer.Context,
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Limit to one source."),
    jobs: int = typer.Option(10, "--jobs", "-j", help="Recent ingestion jobs to list (0 hides them)."),
) -> None:
    """Show document and upsert statistics."""
    from vacancy_rag.cli.commands import db as mod

    mod.stats(get_state(ctx), source=source, jobs=jobs)


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """Create the database schema."""
    from vacancy_rag.cli.commands import db as mod

    mod.init_db(get_state(ctx))


if __name__ == "__main__":
    app()
