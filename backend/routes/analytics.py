# backend/routes/analytics.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from models.nomination import Nomination, NominationStatus
from models.staff import Staff
from models.vote import Vote
from schemas.analytics import (
    AnalyticsOverview, CategoryBreakdown, DepartmentBreakdown, DepartmentEngagement,
    StatusBreakdown, TopNominee, TopVoted, VotesByCategory,
)
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/analytics", tags=["Analytics"])

UNASSIGNED = "Unassigned"
STATUSES = [s.value for s in NominationStatus]


def _pct(count: int, total: int) -> int:
    return round(count / total * 100) if total > 0 else 0


# === Dashboard summary ===
@router.get("/overview", response_model=AnalyticsOverview)
def analytics_overview(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    by_status = dict(db.query(Nomination.status, func.count(Nomination.id)).group_by(Nomination.status).all())
    total_staff = db.query(func.count(Staff.id)).scalar() or 0
    unique_nominees = db.query(func.count(func.distinct(Nomination.nominee_id))).scalar() or 0

    return AnalyticsOverview(
        total_nominations=sum(by_status.values()),
        total_votes=db.query(func.count(Vote.id)).scalar() or 0,
        total_staff=total_staff,
        total_categories=db.query(func.count(Category.id)).scalar() or 0,
        pending_nominations=by_status.get("pending", 0),
        approved_nominations=by_status.get("approved", 0),
        rejected_nominations=by_status.get("rejected", 0),
        shortlisted_nominations=by_status.get("shortlisted", 0),
        participation_rate=_pct(unique_nominees, total_staff),
    )


@router.get("/nominations-by-status", response_model=List[StatusBreakdown])
def nominations_by_status(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    counts = dict(db.query(Nomination.status, func.count(Nomination.id)).group_by(Nomination.status).all())
    total = sum(counts.values())
    return [
        {"status": s, "count": counts.get(s, 0), "percentage": _pct(counts.get(s, 0), total)}
        for s in STATUSES
    ]


# Nominations grouped by the nominee's department
@router.get("/nominations-by-department", response_model=List[DepartmentBreakdown])
def nominations_by_department(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = (
        db.query(Staff.department, func.count(Nomination.id))
        .join(Staff, Staff.id == Nomination.nominee_id)
        .group_by(Staff.department)
        .all()
    )
    merged = {}
    for dept, count in rows:
        key = dept or UNASSIGNED
        merged[key] = merged.get(key, 0) + int(count)

    total = sum(merged.values())
    return sorted(
        ({"department": d, "count": c, "percentage": _pct(c, total)} for d, c in merged.items()),
        key=lambda r: (-r["count"], r["department"]),
    )


@router.get("/nominations-by-category", response_model=List[CategoryBreakdown])
def nominations_by_category(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = (
        db.query(Category.id, Category.title, func.count(Nomination.id))
        .join(Nomination, Nomination.category_id == Category.id)
        .group_by(Category.id, Category.title)
        .all()
    )
    total = sum(int(c) for _, _, c in rows)
    items = [
        {"category_id": cid, "category_title": title, "count": int(c), "percentage": _pct(int(c), total)}
        for cid, title, c in rows
    ]
    return sorted(items, key=lambda r: (-r["count"], r["category_title"]))


@router.get("/votes-by-category", response_model=List[VotesByCategory])
def votes_by_category(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = (
        db.query(Category.id, Category.title, func.count(Vote.id))
        .join(Vote, Vote.category_id == Category.id)
        .group_by(Category.id, Category.title)
        .all()
    )
    items = [{"category_id": cid, "category_title": title, "vote_count": int(c)} for cid, title, c in rows]
    return sorted(items, key=lambda r: (-r["vote_count"], r["category_title"]))


# === Leaderboards ===
@router.get("/top-nominees", response_model=List[TopNominee])
def top_nominees(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    rows = (
        db.query(Staff, func.count(Nomination.id).label("total"))
        .join(Nomination, Nomination.nominee_id == Staff.id)
        .group_by(Staff.id)
        .order_by(func.count(Nomination.id).desc(), Staff.name.asc())
        .limit(limit)
        .all()
    )
    return [
        TopNominee(
            nominee_id=staff.id,
            nominee_name=staff.name,
            department=staff.department or UNASSIGNED,
            avatar=staff.avatar,
            nomination_count=int(total),
        )
        for staff, total in rows
    ]


@router.get("/top-voted", response_model=List[TopVoted])
def top_voted(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    rows = (
        db.query(Staff, Category.title, func.count(Vote.id).label("total"))
        .join(Vote, Vote.nominee_id == Staff.id)
        .join(Category, Category.id == Vote.category_id)
        .group_by(Staff.id, Category.id, Category.title)
        .order_by(func.count(Vote.id).desc(), Staff.name.asc())
        .limit(limit)
        .all()
    )
    return [
        TopVoted(
            nominee_id=staff.id,
            nominee_name=staff.name,
            category_title=title,
            vote_count=int(total),
            avatar=staff.avatar,
        )
        for staff, title, total in rows
    ]


# Nominations and votes received per department, scaled by headcount
@router.get("/department-engagement", response_model=List[DepartmentEngagement])
def department_engagement(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    headcount = dict(
        db.query(Staff.department, func.count(Staff.id))
        .filter(Staff.department != None, Staff.department != "")  # noqa: E711
        .group_by(Staff.department)
        .all()
    )
    nominations = dict(
        db.query(Staff.department, func.count(Nomination.id))
        .join(Nomination, Nomination.nominee_id == Staff.id)
        .group_by(Staff.department)
        .all()
    )
    votes = dict(
        db.query(Staff.department, func.count(Vote.id))
        .join(Vote, Vote.nominee_id == Staff.id)
        .group_by(Staff.department)
        .all()
    )

    items = []
    for dept, staff_count in headcount.items():
        noms = int(nominations.get(dept, 0))
        received = int(votes.get(dept, 0))
        items.append({
            "department": dept,
            "staff_count": int(staff_count),
            "nominations_received": noms,
            "votes_received": received,
            "engagement_score": round((noms * 2 + received) / staff_count * 10),
        })
    return sorted(items, key=lambda r: (-r["engagement_score"], r["department"]))
