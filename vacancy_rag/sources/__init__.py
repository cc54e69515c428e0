# vacancy_rag/sources/__init__.py
"""Attachment sources (IMAP) and the polling loop that ingests them."""

from vacancy_rag.sources.base import Attachment, AttachmentSource
from vacancy_rag.sources.imap import ImapAttachmentSource
from vacancy_rag.sources.poller import AttachmentPoller, PollSummary

__all__ = [
    "Attachment",
    "AttachmentSource",
    "AttachmentPoller",
    "ImapAttachmentSource",
    "PollSummary",
]
