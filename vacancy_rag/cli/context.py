# vacancy_rag/cli/context.py
"""
Shared state for CLI commands: settings, runtime, error reporting.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Generator, Optional

import typer

from vacancy_rag.cli.ui import ui
from vacancy_rag.config.schema import AppSettings, load_settings
from vacancy_rag.core.config import ConfigError
from vacancy_rag.core.exceptions import VacancyRagError
from vacancy_rag.logging.logger import configure_logging, get_logger
from vacancy_rag.logging.tags import CLI
from vacancy_rag.runtime import BACKEND_MEMORY, BACKEND_POSTGRES, Runtime, build_runtime

logger = get_logger(__name__)


@dataclass
class CLIState:
    config_path: Optional[Path] = None
    verbose: bool = False
    memory: bool = False

    @property
    def backend(self) -> str:
        return BACKEND_MEMORY if self.memory else BACKEND_POSTGRES


def setup(state: CLIState) -> None:
    configure_logging(logging.DEBUG if state.verbose else logging.WARNING)


def get_state(ctx: typer.Context) -> CLIState:
    if isinstance(ctx.obj, CLIState):
        return ctx.obj
    return CLIState()


def load_app_settings(state: CLIState) -> AppSettings:
    return load_settings(state.config_path)


def open_runtime(state: CLIState, track_jobs: bool = True) -> Runtime:
    settings = load_app_settings(state)
    logger.debug(f"{CLI} Building runtime (backend={state.backend})")
    return build_runtime(settings, backend=state.backend, track_jobs=track_jobs)


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Turn expected failures into a readable message and exit code 1."""
    try:
        yield
    except (VacancyRagError, ConfigError, FileNotFoundError) as e:
        ui.error(str(e))
        raise typer.Exit(code=1) from e


__all__ = ["CLIState", "get_state", "handle_errors", "load_app_settings", "open_runtime", "setup"]
