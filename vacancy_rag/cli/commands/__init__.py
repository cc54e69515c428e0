# vacancy_rag/cli/commands/__init__.py
"""CLI command implementations, imported lazily by vacancy_rag.cli.cli."""
