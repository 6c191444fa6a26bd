# utils/tally.py
from collections import OrderedDict
from typing import List, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.nomination import Nomination
from models.staff import Staff
from models.vote import Vote


def vote_counts(db: Session, category_id: int) -> List[Tuple[Staff, int]]:
    """Per-nominee vote counts in a category, highest first, ties by name."""
    rows = (
        db.query(Staff, func.count(Vote.id).label("votes"))
        .join(Vote, Vote.nominee_id == Staff.id)
        .filter(Vote.category_id == category_id)
        .group_by(Staff.id)
        .all()
    )
    return sorted(((staff, int(votes)) for staff, votes in rows), key=lambda r: (-r[1], r[0].name, r[0].id))


def leading_nominee(db: Session, category_id: int):
    counts = vote_counts(db, category_id)
    if not counts or counts[0][1] == 0:
        return None, 0
    return counts[0]


def percentage(count: int, total: int, digits: int = 1) -> float:
    return round(count / total * 100, digits) if total > 0 else 0.0


def nominees_with_counts(db: Session, category_id: int, finalists_only: bool = False) -> List[dict]:
    """
    Nominations of a category grouped by nominee.

    With finalists_only the ballot is returned (every nomination flagged
    is_finalist); otherwise approved nominations, where a nominee counts as a
    finalist when any of their nominations carries the flag.
    """
    q = db.query(Nomination).filter(Nomination.category_id == category_id)
    if finalists_only:
        q = q.filter(Nomination.is_finalist == True)  # noqa: E712
    else:
        q = q.filter(Nomination.status == "approved")

    grouped: "OrderedDict[int, dict]" = OrderedDict()
    for nom in q.order_by(Nomination.id.asc()).all():
        if nom.nominee is None:
            continue
        entry = grouped.get(nom.nominee_id)
        if entry is None:
            grouped[nom.nominee_id] = {
                "nominee_id": nom.nominee_id,
                "nominee": nom.nominee,
                "nomination_count": 1,
                "is_finalist": bool(nom.is_finalist),
            }
        else:
            entry["nomination_count"] += 1
            entry["is_finalist"] = entry["is_finalist"] or bool(nom.is_finalist)

    return sorted(grouped.values(), key=lambda e: -e["nomination_count"])


def finalist_ids(db: Session, category_id: int) -> List[int]:
    rows = (
        db.query(Nomination.nominee_id)
        .filter(Nomination.category_id == category_id, Nomination.is_finalist == True)  # noqa: E712
        .distinct()
        .all()
    )
    return [r[0] for r in rows]
