# utils/phases.py
"""
Derivation of the phase a category is in, as shown to staff.

The phase is never stored: it is recomputed from the category's dates and
status on every read.
"""
from datetime import datetime, timezone
from typing import Optional

NOMINATIONS = "nominations"
VOTING = "voting"
UPCOMING = "upcoming"
CLOSED = "closed"


def utcnow() -> datetime:
    """Current time as naive UTC, the format every stored window uses."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def category_phase(category, now: Optional[datetime] = None) -> str:
    now = to_naive_utc(now) if now else utcnow()

    if category.status == "closed" or category.winner_id is not None:
        return CLOSED

    voting_start = to_naive_utc(category.voting_start)
    voting_end = to_naive_utc(category.voting_end)
    nomination_start = to_naive_utc(category.nomination_start)
    deadline = to_naive_utc(category.nomination_deadline)

    if voting_start and voting_start <= now and (voting_end is None or now <= voting_end):
        return VOTING

    if deadline and now <= deadline and (nomination_start is None or nomination_start <= now):
        return NOMINATIONS

    if voting_end and now > voting_end:
        return CLOSED

    return UPCOMING
