# vacancy_rag/sources/imap.py
"""
IMAP attachment source.

Searches the mailbox for UNSEEN messages (optionally filtered by sender
and subject), keeps the newest max_emails, and returns their CSV
attachments (content type text/csv or a .csv file name).
"""

from __future__ import annotations

import email
import imaplib
from email.message import Message
from email.utils import parsedate_to_datetime
from typing import Callable, List, Optional

from vacancy_rag.config.schema import EmailSettings
from vacancy_rag.core.exceptions import ConfigurationError, SourceError
from vacancy_rag.logging.logger import get_logger
from vacancy_rag.logging.tags import POLLER
from vacancy_rag.sources.base import Attachment

logger = get_logger(__name__)


def is_csv_part(part: Message) -> bool:
    filename = part.get_filename() or ""
    return part.get_content_type() == "text/csv" or filename.lower().endswith(".csv")


def extract_csv_attachments(message: Message) -> List[Attachment]:
    """Collect CSV attachments from a parsed message."""
    subject = message.get("Subject")
    sender = message.get("From")
    received_at = None
    if message.get("Date"):
        try:
            received_at = parsedate_to_datetime(message["Date"])
        except (TypeError, ValueError):
            received_at = None

    attachments: List[Attachment] = []
    for part in message.walk():
        if part.is_multipart() or not is_csv_part(part):
            continue
        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        attachments.append(
            Attachment(
                filename=part.get_filename() or "attachment.csv",
                content=payload,
                subject=subject,
                sender=sender,
                received_at=received_at,
            )
        )
    return attachments


def build_search_criteria(
    from_address: Optional[str] = None,
    subject_contains: Optional[str] = None,
) -> List[str]:
    criteria = ["UNSEEN"]
    if from_address:
        criteria.extend(["FROM", f'"{from_address}"'])
    if subject_contains:
        criteria.extend(["SUBJECT", f'"{subject_contains}"'])
    return criteria


class ImapAttachmentSource:
    """
    Fetches CSV attachments from unseen messages over IMAP (SSL).

    Usage:
        source = ImapAttachmentSource(settings.email)
        for attachment in source.fetch():
            pipeline.ingest_bytes(attachment.content, attachment.filename)
    """

    def __init__(
        self,
        settings: EmailSettings,
        connect: Callable[[str, int], imaplib.IMAP4] = imaplib.IMAP4_SSL,
    ):
        if not settings.has_credentials():
            raise ConfigurationError(
                "Email credentials not configured. Set EMAIL_USER and EMAIL_PASSWORD."
            )
        self.settings = settings
        self._connect = connect

    def _open(self) -> imaplib.IMAP4:
        s = self.settings
        try:
            client = self._connect(s.host, s.port)
            client.login(s.user, s.password)
            status, _ = client.select(s.mailbox)
        except (imaplib.IMAP4.error, OSError) as e:
            raise SourceError(f"Could not open mailbox {s.mailbox} on {s.host}: {e}") from e

        if status != "OK":
            raise SourceError(f"Could not select mailbox {s.mailbox} on {s.host}")
        return client

    def fetch(self) -> List[Attachment]:
        """
        Return CSV attachments from unseen messages.

        Messages that fail to fetch or parse are logged and skipped.
        Fetching marks a message seen unless mark_seen is False.

        Raises:
            SourceError: If the mailbox can't be opened or searched
        """
        s = self.settings
        client = self._open()
        try:
            criteria = build_search_criteria(s.from_address, s.subject_contains)
            try:
                status, data = client.search(None, *criteria)
            except imaplib.IMAP4.error as e:
                raise SourceError(f"IMAP search failed: {e}") from e
            if status != "OK":
                raise SourceError(f"IMAP search failed with status {status}")

            ids = data[0].split() if data and data[0] else []
            ids = ids[-s.max_emails :]
            logger.info(f"{POLLER} Found {len(ids)} unseen messages")

            fetch_spec = "(RFC822)" if s.mark_seen else "(BODY.PEEK[])"
            attachments: List[Attachment] = []
            for msg_id in ids:
                try:
                    status, parts = client.fetch(msg_id, fetch_spec)
                    if status != "OK":
                        raise SourceError(f"fetch returned {status}")
                    raw = next(p[1] for p in parts if isinstance(p, tuple))
                    message = email.message_from_bytes(raw)
                except Exception as e:
                    logger.warning(f"{POLLER} Skipping message {msg_id!r}: {e}")
                    continue

                found = extract_csv_attachments(message)
                if found:
                    logger.info(
                        f"{POLLER} {len(found)} CSV attachment(s) in {message.get('Subject')!r}"
                    )
                attachments.extend(found)

            return attachments
        finally:
            try:
                client.logout()
            except (imaplib.IMAP4.error, OSError) as e:
                logger.debug(f"{POLLER} Logout failed: {e}")


__all__ = [
    "ImapAttachmentSource",
    "build_search_criteria",
    "extract_csv_attachments",
    "is_csv_part",
]
