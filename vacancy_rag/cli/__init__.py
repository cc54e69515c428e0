# vacancy_rag/cli/__init__.py
"""
vacancy-rag CLI.

Usage:
    vacancy-rag ingest units.csv
    vacancy-rag check-uids units.csv
    vacancy-rag ask "Which units are vacant at Oak Plaza?"
    vacancy-rag poll --once
    vacancy-rag stats
"""

from vacancy_rag.cli.cli import app

__all__ = ["app"]
