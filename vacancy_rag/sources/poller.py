# vacancy_rag/sources/poller.py
"""
Interval polling of an attachment source into the ingestion pipeline.

Each attachment is written to a transient directory, ingested, and
removed. A failing attachment is logged and counted; it never stops the
cycle. stop() is honoured between cycles: a running cycle finishes first.
"""

from __future__ import annotations

import re
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from vacancy_rag.ingestion.pipeline import IngestionPipeline, IngestResult
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import POLLER
from vacancy_rag.sources.base import Attachment, AttachmentSource

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    """Strip directories and unsafe characters from an attachment name."""
    base = Path(name).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "attachment.csv"


@dataclass
class PollSummary:
    """Outcome of one poll cycle."""

    attachments: int = 0
    ingested: int = 0
    skipped: int = 0
    failed: int = 0
    results: List[IngestResult] = field(default_factory=list)
    error_details: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"attachments {self.attachments}, ingested {self.ingested}, "
            f"skipped {self.skipped}, failed {self.failed}"
        )


class AttachmentPoller:
    """
    Polls a source and ingests what it returns.

    Usage:
        poller = AttachmentPoller(ImapAttachmentSource(settings.email), pipeline)
        poller.run()          # until stop()
        poller.poll_once()    # single cycle
    """

    def __init__(
        self,
        source: AttachmentSource,
        pipeline: IngestionPipeline,
        interval_seconds: float = 300.0,
        work_dir: Optional[Path] = None,
        clear_existing: bool = False,
    ):
        self.source = source
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds
        self.work_dir = work_dir
        self.clear_existing = clear_existing
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self) -> None:
        self._stop.set()

    def _ingest(self, attachment: Attachment, directory: Path) -> IngestResult:
        path = directory / safe_filename(attachment.filename)
        path.write_bytes(attachment.content)
        try:
            return self.pipeline.ingest_file(
                path,
                source=attachment.filename,
                clear_existing=self.clear_existing,
            )
        finally:
            path.unlink(missing_ok=True)

    def poll_once(self) -> PollSummary:
        """
        Run one fetch-and-ingest cycle.

        Source errors (e.g. mailbox unreachable) propagate; per-attachment
        errors are counted.
        """
        attachments = self.source.fetch()
        summary = PollSummary(attachments=len(attachments))

        if not attachments:
            logger.info(f"{POLLER} No new attachments")
            return summary

        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(
            prefix="vacancy_rag_", dir=str(self.work_dir) if self.work_dir else None
        ) as tmp:
            directory = Path(tmp)
            for attachment in attachments:
                logger.info(f"{POLLER} Processing {attachment.filename}")
                try:
                    result = self._ingest(attachment, directory)
                except Exception as e:
                    summary.failed += 1
                    summary.error_details.append(f"{attachment.filename}: {e}")
                    logger.error(f"{POLLER} Failed to process {attachment.filename}: {e}")
                    continue

                summary.results.append(result)
                if result.skipped:
                    summary.skipped += 1
                else:
                    summary.ingested += 1

        logger.info(f"{POLLER} Cycle complete: {summary}")
        return summary

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Poll until stop() is called (or max_cycles cycles have run).

        A cycle that raises is logged and the loop carries on.

        Returns:
            Number of cycles run
        """
        cycles = 0
        logger.info(f"{POLLER} Polling every {self.interval_seconds}s")

        while not self._stop.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"{POLLER} Poll cycle failed: {e}")
            cycles += 1

            if max_cycles is not None and cycles >= max_cycles:
                break
            self._stop.wait(self.interval_seconds)

        logger.info(f"{POLLER} Stopped after {cycles} cycle(s)")
        return cycles


__all__ = ["AttachmentPoller", "PollSummary", "safe_filename"]
