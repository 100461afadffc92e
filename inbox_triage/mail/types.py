"""Data types shared across the mail and triage modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from inbox_triage.triage.categories import Category, categorize


@dataclass(frozen=True)
class Message:
    """An unread Gmail message, snapshotted at fetch time.

    Never mutated locally: clearing the UNREAD label is a remote call
    (GmailClient.mark_read), not a change to this object.
    """

    id: str
    sender: str
    subject: str
    body: str
    received_at: datetime       # timezone-aware, UTC
    is_direct: bool = False     # non-empty To header; does not distinguish To from Cc
    has_attachments: bool = False
    labels: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ScoredMessage:
    """A Message paired with its importance score. Recomputed on every query."""

    message: Message
    importance_score: int

    @property
    def category(self) -> Category:
        return categorize(self.importance_score)
