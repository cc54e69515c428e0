# vacancy_rag/logging/logger.py
"""
Unified logging setup for vacancy_rag.

All modules use:
    from vacancy_rag.logging.logger import get_logger
    logger = get_logger(__name__)

Configuration happens once, at the entrypoint (CLI or embedding application).
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

DEFAULT_FORMAT = "[%(levelname)s] %(name)s - %(message)s"


def configure_logging(
    level: int = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure the root logging handler.

    Safe to call multiple times - handler duplication is prevented.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)

    # httpx logs every request at INFO through the openai client
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """
    Modules call this to get a logger.

    Do NOT configure logging here - configuration happens in configure_logging().
    """
    return logging.getLogger(name)
