# vacancy_rag/cli/commands/poll.py
"""
Poll the mailbox for CSV attachments and ingest them.

Usage:
    vacancy-rag poll --once
    vacancy-rag poll --interval 120
"""

from __future__ import annotations

from typing import Optional

from vacancy_rag.cli.context import CLIState, handle_errors, open_runtime, setup
from vacancy_rag.cli.ui import ui
from vacancy_rag.sources.imap import ImapAttachmentSource
from vacancy_rag.sources.poller import AttachmentPoller


def command(state: CLIState, once: bool = False, interval: Optional[float] = None) -> None:
    setup(state)

    with handle_errors():
        runtime = open_runtime(state)
        try:
            email_settings = runtime.settings.email
            poller = AttachmentPoller(
                ImapAttachmentSource(email_settings),
                runtime.pipeline,
                interval_seconds=interval or email_settings.poll_interval_seconds,
                clear_existing=runtime.settings.ingest.clear_existing,
            )

            if once:
                summary = poller.poll_once()
                ui.success(f"Poll complete: {summary}")
                for detail in summary.error_details:
                    ui.warning(detail)
                return

            ui.info(f"Polling every {poller.interval_seconds:.0f}s. Press Ctrl+C to stop.")
            try:
                poller.run()
            except KeyboardInterrupt:
                poller.stop()
                ui.info("Stopped.")
        finally:
            runtime.close()
