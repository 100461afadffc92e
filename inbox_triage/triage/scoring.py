"""Heuristic importance scoring for unread email."""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from inbox_triage.mail.types import Message

SPAM_SCORE = -10
MAX_SCORE = 100

# Only the first part of the body is inspected.
BODY_SNIPPET_CHARS = 500

# Two or more hits short-circuit the whole score to SPAM_SCORE.
SPAM_INDICATORS: tuple[str, ...] = (
    "unsubscribe",
    "promotional",
    "marketing",
    "newsletter",
    "no-reply",
    "advertisement",
    "deals",
    "offer expires",
    "limited time",
    "act now",
)
SPAM_THRESHOLD = 2

# keyword → base weight; subject hits are worth SUBJECT_MULTIPLIER times more
IMPORTANCE_KEYWORDS: dict[str, int] = {
    "urgent": 10,
    "important": 8,
    "asap": 10,
    "deadline": 7,
    "meeting": 6,
    "action required": 9,
    "please respond": 7,
    "invoice": 6,
    "payment": 6,
    "reminder": 5,
    "interview": 8,
    "approval": 7,
}
SUBJECT_MULTIPLIER = 1.5

VIP_BONUS = 20
DIRECT_BONUS = 10
ATTACHMENT_BONUS = 5

# (max age, bonus), checked in order
RECENCY_TIERS: tuple[tuple[timedelta, int], ...] = (
    (timedelta(hours=4), 15),
    (timedelta(hours=24), 5),
)


def count_spam_indicators(subject: str, body_snippet: str) -> int:
    """Number of SPAM_INDICATORS found in either (already lower-cased) field."""
    return sum(
        1 for indicator in SPAM_INDICATORS
        if indicator in subject or indicator in body_snippet
    )


def is_vip_sender(sender: str, vip_domains: Iterable[str]) -> bool:
    """Substring match of each domain against the lower-cased sender.

    Deliberately loose: "a.com" also matches "b-a.com".
    """
    sender = sender.lower()
    return any(domain in sender for domain in vip_domains)


def recency_bonus(received_at: datetime, now: datetime) -> int:
    age = now - received_at
    for max_age, bonus in RECENCY_TIERS:
        if age < max_age:
            return bonus
    return 0


def score_message(
    message: Message,
    vip_domains: Iterable[str],
    now: datetime | None = None,
) -> int:
    """Score a message from SPAM_SCORE (-10) to MAX_SCORE (100).

    Pure given its arguments; `now` defaults to the current UTC time and is
    only used for the recency bonus.
    """
    subject = message.subject.lower()
    body = message.body[:BODY_SNIPPET_CHARS].lower()

    if count_spam_indicators(subject, body) >= SPAM_THRESHOLD:
        return SPAM_SCORE

    score = 0.0
    if is_vip_sender(message.sender, vip_domains):
        score += VIP_BONUS

    for keyword, weight in IMPORTANCE_KEYWORDS.items():
        if keyword in subject:
            score += weight * SUBJECT_MULTIPLIER
        if keyword in body:
            score += weight

    if message.is_direct:
        score += DIRECT_BONUS

    score += recency_bonus(message.received_at, now or datetime.now(timezone.utc))

    if message.has_attachments:
        score += ATTACHMENT_BONUS

    return int(min(score, MAX_SCORE))
