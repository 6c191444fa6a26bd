# backend/routes/nominations.py
import logging
from collections import OrderedDict
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.category import Category, CategoryStatus
from models.nomination import Nomination, NominationStatus
from models.staff import Staff
from schemas.category import FinalistList
from schemas.common import MessageResponse
from schemas.nomination import (
    FinalistSelection, LeaderboardItem, MyNominationOut, NominationCounts,
    NominationCreate, NominationOut, NominationPage, NominationStatusUpdate,
)
from utils.audit import client_ip, write_log
from utils.phases import NOMINATIONS, category_phase
from utils.shortlist import FinalistCapExceeded, check_finalist_cap
from utils.tally import finalist_ids, nominees_with_counts
from utils.tokenJWT import get_current_user, require_admin

router = APIRouter(prefix="/nominations", tags=["Nominations"])
logger = logging.getLogger(__name__)

DUPLICATE_NOMINATION = "You have already nominated this person for this category."

StatusFilter = Literal["pending", "approved", "rejected", "shortlisted"]


def _with_details(query):
    return query.options(joinedload(Nomination.nominee), joinedload(Nomination.category))


def _get_nomination_or_404(db: Session, nomination_id: int) -> Nomination:
    nomination = _with_details(db.query(Nomination)).filter(Nomination.id == nomination_id).first()
    if not nomination:
        raise HTTPException(status_code=404, detail="Nomination not found")
    return nomination


def _get_category_or_404(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _to_mine(nomination: Nomination) -> MyNominationOut:
    data = NominationOut.model_validate(nomination).model_dump()
    data["can_cancel"] = nomination.status == NominationStatus.PENDING.value
    return MyNominationOut.model_validate(data)


# =========================
# SUBMITTING AND CANCELLING
# =========================
@router.post("", response_model=NominationOut, status_code=201)
def create_nomination(
    payload: NominationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    category = db.query(Category).filter(Category.id == payload.category_id).first()
    if not category or category.status != CategoryStatus.PUBLISHED.value:
        raise HTTPException(status_code=404, detail="Category not found")
    if category_phase(category) != NOMINATIONS:
        raise HTTPException(status_code=400, detail="Nominations are not open for this category")

    nominee = db.query(Staff).filter(Staff.id == payload.nominee_id).first()
    if not nominee:
        raise HTTPException(status_code=404, detail="Nominee not found")

    nomination = Nomination(
        category_id=category.id,
        nominee_id=nominee.id,
        nominator_id=current_user.id,
        reason=payload.reason.strip(),
        status=NominationStatus.PENDING.value,
    )
    db.add(nomination)
    try:
        db.commit()
    except IntegrityError:
        # Unique (category, nominee, nominator) also catches concurrent double submits
        db.rollback()
        raise HTTPException(status_code=409, detail=DUPLICATE_NOMINATION)
    db.refresh(nomination)

    write_log(db, user_id=current_user.id, action="NOMINATION_CREATE", resource="nominations",
              status="SUCCESS", ip=client_ip(request),
              meta={"id": nomination.id, "category_id": category.id, "nominee_id": nominee.id})
    return _get_nomination_or_404(db, nomination.id)


# Nominations submitted by the caller
@router.get("/mine", response_model=List[MyNominationOut])
def my_nominations(
    status: Optional[StatusFilter] = Query(None),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    query = _with_details(db.query(Nomination)).filter(Nomination.nominator_id == current_user.id)
    if status:
        query = query.filter(Nomination.status == status)
    rows = query.order_by(Nomination.created_at.desc(), Nomination.id.desc()).all()
    return [_to_mine(n) for n in rows]


# =========================
# ADMIN REVIEW
# =========================
@router.get("", response_model=NominationPage)
def list_nominations(
    status: Optional[StatusFilter] = Query(None),
    category_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    query = db.query(Nomination)
    if status:
        query = query.filter(Nomination.status == status)
    if category_id is not None:
        query = query.filter(Nomination.category_id == category_id)

    total = query.count()
    items = (
        _with_details(query)
        .order_by(Nomination.created_at.desc(), Nomination.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"items": items, "total": total, "page": page, "page_size": page_size}


@router.get("/pending", response_model=List[NominationOut])
def pending_nominations(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    return (
        _with_details(db.query(Nomination))
        .filter(Nomination.status == NominationStatus.PENDING.value)
        .order_by(Nomination.created_at.desc(), Nomination.id.desc())
        .all()
    )


@router.get("/shortlisted", response_model=List[NominationOut])
def shortlisted_nominations(
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    query = _with_details(db.query(Nomination)).filter(Nomination.status == NominationStatus.SHORTLISTED.value)
    if category_id is not None:
        query = query.filter(Nomination.category_id == category_id)
    return query.order_by(Nomination.created_at.desc(), Nomination.id.desc()).all()


@router.get("/counts", response_model=NominationCounts)
def nomination_counts(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = db.query(Nomination.status, func.count(Nomination.id)).group_by(Nomination.status).all()
    by_status = {s: int(c) for s, c in rows}
    return NominationCounts(
        total=sum(by_status.values()),
        pending=by_status.get("pending", 0),
        approved=by_status.get("approved", 0),
        rejected=by_status.get("rejected", 0),
        shortlisted=by_status.get("shortlisted", 0),
    )


# Count of non-rejected nominations per (nominee, category), highest first
@router.get("/leaderboard", response_model=List[LeaderboardItem])
def nomination_leaderboard(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    rows = (
        _with_details(db.query(Nomination))
        .filter(Nomination.status != NominationStatus.REJECTED.value)
        .order_by(Nomination.id.asc())
        .all()
    )

    board: "OrderedDict[tuple, dict]" = OrderedDict()
    for nom in rows:
        key = (nom.nominee_id, nom.category_id)
        if key not in board:
            board[key] = {"nominee": nom.nominee, "category": nom.category, "count": 0}
        board[key]["count"] += 1

    return sorted(board.values(), key=lambda item: -item["count"])


# =========================
# FINALIST SHORTLISTING
# =========================
@router.get("/category/{category_id}/nominees", response_model=FinalistList)
def category_nominees(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    category = _get_category_or_404(db, category_id)
    return {"category_id": category.id, "items": nominees_with_counts(db, category.id)}


@router.post("/category/{category_id}/finalists", response_model=FinalistList)
def mark_finalists(
    category_id: int,
    payload: FinalistSelection,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    # Row lock on the category serialises concurrent shortlisting (no-op on SQLite)
    category = db.query(Category).filter(Category.id == category_id).with_for_update().first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    requested = list(dict.fromkeys(payload.nominee_ids))
    approved = {
        r[0] for r in db.query(Nomination.nominee_id)
        .filter(
            Nomination.category_id == category.id,
            Nomination.status == NominationStatus.APPROVED.value,
            Nomination.nominee_id.in_(requested),
        )
        .distinct()
        .all()
    }
    missing = [n for n in requested if n not in approved]
    if missing:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"No approved nomination in this category for nominee(s) {missing}")

    try:
        check_finalist_cap(finalist_ids(db, category.id), requested)
    except FinalistCapExceeded as e:
        db.rollback()
        write_log(db, user_id=current_user.id, action="FINALISTS_MARK", resource="nominations",
                  status="FAIL", ip=client_ip(request), meta={"category_id": category_id, "nominee_ids": requested})
        raise HTTPException(status_code=409, detail=str(e))

    db.query(Nomination).filter(
        Nomination.category_id == category.id,
        Nomination.status == NominationStatus.APPROVED.value,
        Nomination.nominee_id.in_(requested),
    ).update({Nomination.is_finalist: True}, synchronize_session=False)
    db.commit()

    write_log(db, user_id=current_user.id, action="FINALISTS_MARK", resource="nominations",
              status="SUCCESS", ip=client_ip(request), meta={"category_id": category_id, "nominee_ids": requested})
    return {"category_id": category_id, "items": nominees_with_counts(db, category_id, finalists_only=True)}


@router.delete("/category/{category_id}/finalists/{nominee_id}", response_model=FinalistList)
def remove_finalist(
    category_id: int,
    nominee_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    _get_category_or_404(db, category_id)

    updated = db.query(Nomination).filter(
        Nomination.category_id == category_id,
        Nomination.nominee_id == nominee_id,
        Nomination.is_finalist == True,  # noqa: E712
    ).update({Nomination.is_finalist: False}, synchronize_session=False)
    db.commit()
    if not updated:
        raise HTTPException(status_code=404, detail="Nominee is not a finalist in this category")

    write_log(db, user_id=current_user.id, action="FINALIST_REMOVE", resource="nominations",
              status="SUCCESS", ip=client_ip(request), meta={"category_id": category_id, "nominee_id": nominee_id})
    return {"category_id": category_id, "items": nominees_with_counts(db, category_id, finalists_only=True)}


# =========================
# SINGLE NOMINATION
# =========================
@router.get("/{nomination_id}", response_model=NominationOut)
def get_nomination(
    nomination_id: int,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    nomination = _get_nomination_or_404(db, nomination_id)
    if not current_user.is_admin and nomination.nominator_id != current_user.id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return nomination


@router.put("/{nomination_id}/status", response_model=NominationOut)
def update_nomination_status(
    nomination_id: int,
    payload: NominationStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    nomination = _get_nomination_or_404(db, nomination_id)
    old_status = nomination.status
    nomination.status = payload.status
    db.commit()
    db.refresh(nomination)

    write_log(db, user_id=current_user.id, action="NOMINATION_STATUS", resource="nominations",
              status="SUCCESS", ip=client_ip(request),
              meta={"id": nomination.id, "from": old_status, "to": payload.status})
    return nomination


# Admins delete any nomination; nominators may cancel their own while it is pending
@router.delete("/{nomination_id}", response_model=MessageResponse)
def delete_nomination(
    nomination_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    nomination = _get_nomination_or_404(db, nomination_id)

    if current_user.is_admin:
        db.delete(nomination)
        db.commit()
        action = "NOMINATION_DELETE"
    elif nomination.nominator_id == current_user.id:
        # Status is re-checked inside the DELETE so a concurrent review wins
        deleted = db.query(Nomination).filter(
            Nomination.id == nomination_id,
            Nomination.nominator_id == current_user.id,
            Nomination.status == NominationStatus.PENDING.value,
        ).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            raise HTTPException(status_code=409, detail="Only pending nominations can be cancelled")
        action = "NOMINATION_CANCEL"
    else:
        raise HTTPException(status_code=403, detail="Forbidden")

    write_log(db, user_id=current_user.id, action=action, resource="nominations",
              status="SUCCESS", ip=client_ip(request), meta={"id": nomination_id})
    return {"message": "Nomination cancelled" if action == "NOMINATION_CANCEL" else "Nomination deleted"}
