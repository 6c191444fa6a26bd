# backend/routes/votes.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category, CategoryStatus
from models.nomination import Nomination
from models.staff import Staff
from models.vote import Vote
from schemas.vote import HasVoted, VoteCount, VoteCreate, VoteOut, VoteTotal
from utils.audit import client_ip, write_log
from utils.phases import VOTING, category_phase, utcnow
from utils.tokenJWT import get_current_user, require_admin

router = APIRouter(prefix="/votes", tags=["Votes"])
logger = logging.getLogger(__name__)


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise HTTPException(status_code=500, detail=f"Voting is not supported on the '{dialect}' database")


# Cast or change a vote; (voter, category) is one row however often it is called
@router.post("", response_model=VoteOut)
def cast_vote(
    payload: VoteCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    category = db.query(Category).filter(Category.id == payload.category_id).first()
    if not category or category.status != CategoryStatus.PUBLISHED.value:
        raise HTTPException(status_code=404, detail="Category not found")
    if category_phase(category) != VOTING:
        raise HTTPException(status_code=400, detail="Voting is not open for this category")

    is_finalist = (
        db.query(Nomination.id)
        .filter(
            Nomination.category_id == category.id,
            Nomination.nominee_id == payload.nominee_id,
            Nomination.is_finalist == True,  # noqa: E712
        )
        .first()
    )
    if not is_finalist:
        raise HTTPException(status_code=400, detail="Nominee is not a finalist in this category")

    insert = _insert_for(db)
    now = utcnow()
    stmt = insert(Vote.__table__).values(
        voter_id=current_user.id,
        category_id=category.id,
        nominee_id=payload.nominee_id,
        voted_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["voter_id", "category_id"],
        set_={"nominee_id": stmt.excluded.nominee_id, "voted_at": stmt.excluded.voted_at},
    )
    db.execute(stmt)
    db.commit()

    vote = (
        db.query(Vote)
        .filter(Vote.voter_id == current_user.id, Vote.category_id == category.id)
        .populate_existing()
        .first()
    )
    write_log(db, user_id=current_user.id, action="VOTE_CAST", resource="votes",
              status="SUCCESS", ip=client_ip(request),
              meta={"category_id": category.id, "nominee_id": payload.nominee_id})
    return vote


# The caller's current vote in a category, null when none
@router.get("/mine", response_model=Optional[VoteOut])
def my_vote(
    category_id: int = Query(...),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    return (
        db.query(Vote)
        .filter(Vote.voter_id == current_user.id, Vote.category_id == category_id)
        .first()
    )


@router.get("/has-voted/{category_id}", response_model=HasVoted)
def has_voted(category_id: int, db: Session = Depends(get_db), current_user: Staff = Depends(get_current_user)):
    found = (
        db.query(Vote.id)
        .filter(Vote.voter_id == current_user.id, Vote.category_id == category_id)
        .first()
    )
    return {"category_id": category_id, "has_voted": found is not None}


# Per-nominee counts in a category (Admin only)
@router.get("/counts/{category_id}", response_model=List[VoteCount])
def vote_counts(category_id: int, db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = (
        db.query(Vote.nominee_id, func.count(Vote.id).label("count"))
        .filter(Vote.category_id == category_id)
        .group_by(Vote.nominee_id)
        .order_by(func.count(Vote.id).desc(), Vote.nominee_id.asc())
        .all()
    )
    return [{"nominee_id": nominee_id, "count": int(count)} for nominee_id, count in rows]


@router.get("/total", response_model=VoteTotal)
def vote_total(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    return {"total": db.query(func.count(Vote.id)).scalar() or 0}
