"""Triage service: fetch → score → filter/sort/aggregate."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from inbox_triage.mail.types import Message, ScoredMessage
from inbox_triage.triage.categories import Category
from inbox_triage.triage.scoring import score_message
from inbox_triage.triage.vip import VipRegistry

logger = logging.getLogger(__name__)


@runtime_checkable
class MailSource(Protocol):
    """What the triage service needs from a mail provider."""

    async def fetch_unread(self, hours_back: float = 24) -> list[Message]:
        ...

    async def mark_read(self, email_id: str) -> None:
        ...


@dataclass(frozen=True)
class TriageSummary:
    hours_back: float
    total: int
    urgent: int = 0
    important: int = 0
    normal: int = 0
    likely_spam: int = 0

    @property
    def recommendation(self) -> str:
        if self.urgent > 0:
            return f"You have {self.urgent} urgent email(s) that need attention!"
        if self.important > 0:
            return f"You have {self.important} important email(s) to review."
        return "All caught up! No urgent emails."


class TriageService:
    """Scores unread mail against the VIP registry and ranks or counts it.

    The registry is read at query time, so domains added mid-session take
    effect on the next call. `clock` supplies the reference time for the
    recency bonus; tests pass a fixed one.

    Usage::

        service = TriageService(gmail, VipRegistry(["acme.com"]))
        top = await service.fetch_important(hours_back=24, min_importance=30)
    """

    def __init__(
        self,
        mail_source: MailSource,
        vip_registry: VipRegistry,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._mail = mail_source
        self._vips = vip_registry
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def score_unread(self, hours_back: float = 24) -> list[ScoredMessage]:
        """Fetch and score every unread message in the window, unsorted."""
        messages = await self._mail.fetch_unread(hours_back)
        vip_domains = self._vips.list()
        now = self._clock()
        return [
            ScoredMessage(message=m, importance_score=score_message(m, vip_domains, now))
            for m in messages
        ]

    async def fetch_important(
        self,
        hours_back: float = 24,
        min_importance: int = 30,
        max_results: int = 10,
    ) -> list[ScoredMessage]:
        """Messages scoring at least `min_importance`, best first, at most `max_results`."""
        scored = await self.score_unread(hours_back)
        kept = [s for s in scored if s.importance_score >= min_importance]
        kept.sort(key=lambda s: s.importance_score, reverse=True)
        logger.info(
            "Triage: %d of %d unread message(s) scored >= %d",
            len(kept),
            len(scored),
            min_importance,
        )
        return kept[: max(max_results, 0)]

    async def summarize(self, hours_back: float = 24) -> TriageSummary:
        scored = await self.score_unread(hours_back)
        counts = {c: 0 for c in Category}
        for s in scored:
            counts[s.category] += 1
        return TriageSummary(
            hours_back=hours_back,
            total=len(scored),
            urgent=counts[Category.URGENT],
            important=counts[Category.IMPORTANT],
            normal=counts[Category.NORMAL],
            likely_spam=counts[Category.LIKELY_SPAM],
        )

    async def mark_handled(self, email_id: str) -> None:
        """Clear the UNREAD marker so the message drops out of future triage."""
        await self._mail.mark_read(email_id)
