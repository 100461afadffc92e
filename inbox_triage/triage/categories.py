"""Urgency categories: the score bands a triage summary counts by."""

from enum import Enum

URGENT_THRESHOLD = 70
IMPORTANT_THRESHOLD = 40
NORMAL_THRESHOLD = 0


class Category(str, Enum):
    """Score bands; together they cover every possible score exactly once."""

    URGENT = "urgent"             # >= 70
    IMPORTANT = "important"       # [40, 70)
    NORMAL = "normal"             # [0, 40)
    LIKELY_SPAM = "likely_spam"   # < 0, only reachable via the spam short-circuit


def categorize(score: int) -> Category:
    if score >= URGENT_THRESHOLD:
        return Category.URGENT
    if score >= IMPORTANT_THRESHOLD:
        return Category.IMPORTANT
    if score >= NORMAL_THRESHOLD:
        return Category.NORMAL
    return Category.LIKELY_SPAM
