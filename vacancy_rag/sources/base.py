# vacancy_rag/sources/base.py
"""Attachment source contract."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable


@dataclass
class Attachment:
    """A CSV attachment pulled from a message."""

    filename: str
    content: bytes
    subject: Optional[str] = None
    sender: Optional[str] = None
    received_at: Optional[datetime] = None


@runtime_checkable
class AttachmentSource(Protocol):
    """Yields new CSV attachments; each call returns only unseen ones."""

    def fetch(self) -> List[Attachment]: ...


__all__ = ["Attachment", "AttachmentSource"]
