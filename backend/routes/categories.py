# backend/routes/categories.py
from datetime import datetime
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category, CategoryStatus
from models.nomination import Nomination
from models.staff import Staff
from models.vote import Vote
from schemas.category import CategoryOut, FinalistList, WinnerPublish
from schemas.common import MessageResponse
from utils.audit import client_ip, write_log
from utils.phases import category_phase, to_naive_utc, utcnow
from utils.storage import CATEGORY_IMAGES, remove_image, save_image
from utils.tally import leading_nominee, nominees_with_counts
from utils.tokenJWT import get_optional_user, require_admin

router = APIRouter(prefix="/categories", tags=["Categories"])

CategoryTypeField = Literal["Individual Award", "Team Award"]
CategoryStatusField = Literal["draft", "published", "closed"]


def _is_admin(user: Optional[Staff]) -> bool:
    return user is not None and user.is_admin


def category_to_out(category: Category, now: Optional[datetime] = None) -> CategoryOut:
    out = CategoryOut.model_validate(category)
    out.phase = category_phase(category, now)
    return out


def get_visible_category(db: Session, category_id: int, user: Optional[Staff]) -> Category:
    """Load a category; drafts and closed ones only exist for admins outside of results."""
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category or (not _is_admin(user) and category.status != CategoryStatus.PUBLISHED.value):
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _check_windows(category: Category) -> None:
    pairs = [
        ("nomination_start", "nomination_deadline"),
        ("shortlisting_start", "shortlisting_end"),
        ("voting_start", "voting_end"),
    ]
    for start_attr, end_attr in pairs:
        start, end = getattr(category, start_attr), getattr(category, end_attr)
        if start and end and start > end:
            raise HTTPException(status_code=400, detail=f"{start_attr} must be before {end_attr}")


# List categories: admins see everything, everyone else only published ones
@router.get("", response_model=List[CategoryOut])
def list_categories(
    status: Optional[CategoryStatusField] = Query(None, description="Filter by status (admin only)"),
    db: Session = Depends(get_db),
    current_user: Optional[Staff] = Depends(get_optional_user),
):
    query = db.query(Category)
    if _is_admin(current_user):
        if status:
            query = query.filter(Category.status == status)
        query = query.order_by(Category.created_at.desc(), Category.id.desc())
    else:
        query = query.filter(Category.status == CategoryStatus.PUBLISHED.value).order_by(
            Category.nomination_deadline.asc(), Category.id.asc()
        )

    now = utcnow()
    return [category_to_out(c, now) for c in query.all()]


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[Staff] = Depends(get_optional_user),
):
    return category_to_out(get_visible_category(db, category_id, current_user))


# Create a category (Admin only), starts as a draft unless told otherwise
@router.post("", response_model=CategoryOut, status_code=201)
def create_category(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
    file: Optional[UploadFile] = File(None),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    type: CategoryTypeField = Form("Individual Award"),
    department: Optional[str] = Form(None),
    status: CategoryStatusField = Form("draft"),
    nomination_start: Optional[datetime] = Form(None),
    nomination_deadline: Optional[datetime] = Form(None),
    shortlisting_start: Optional[datetime] = Form(None),
    shortlisting_end: Optional[datetime] = Form(None),
    voting_start: Optional[datetime] = Form(None),
    voting_end: Optional[datetime] = Form(None),
):
    if not title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    category = Category(
        title=title.strip(),
        description=description,
        type=type,
        department=department or None,
        status=status,
        nomination_start=to_naive_utc(nomination_start),
        nomination_deadline=to_naive_utc(nomination_deadline),
        shortlisting_start=to_naive_utc(shortlisting_start),
        shortlisting_end=to_naive_utc(shortlisting_end),
        voting_start=to_naive_utc(voting_start),
        voting_end=to_naive_utc(voting_end),
    )
    _check_windows(category)

    if file:
        category.image = save_image(CATEGORY_IMAGES, file)

    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "title": category.title})
    return category_to_out(category)


# Partially update a category (Admin only)
@router.patch("/{category_id}", response_model=CategoryOut)
def edit_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    type: Optional[CategoryTypeField] = Form(None),
    department: Optional[str] = Form(None),
    status: Optional[CategoryStatusField] = Form(None),
    nomination_start: Optional[datetime] = Form(None),
    nomination_deadline: Optional[datetime] = Form(None),
    shortlisting_start: Optional[datetime] = Form(None),
    shortlisting_end: Optional[datetime] = Form(None),
    voting_start: Optional[datetime] = Form(None),
    voting_end: Optional[datetime] = Form(None),
):
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")

    if title is not None:
        if not title.strip():
            raise HTTPException(status_code=400, detail="Title is required")
        c.title = title.strip()
    if description is not None: c.description = description
    if type is not None: c.type = type
    if department is not None: c.department = department or None
    if status is not None: c.status = status
    if nomination_start is not None: c.nomination_start = to_naive_utc(nomination_start)
    if nomination_deadline is not None: c.nomination_deadline = to_naive_utc(nomination_deadline)
    if shortlisting_start is not None: c.shortlisting_start = to_naive_utc(shortlisting_start)
    if shortlisting_end is not None: c.shortlisting_end = to_naive_utc(shortlisting_end)
    if voting_start is not None: c.voting_start = to_naive_utc(voting_start)
    if voting_end is not None: c.voting_end = to_naive_utc(voting_end)
    _check_windows(c)

    if file:
        new_url = save_image(CATEGORY_IMAGES, file)
        remove_image(c.image)
        c.image = new_url

    db.commit()
    db.refresh(c)

    write_log(db, user_id=current_user.id, action="CATEGORY_EDIT", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": c.id})
    return category_to_out(c)


# Delete a category together with its nominations and votes (Admin only)
@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")

    title, image = c.title, c.image
    db.query(Vote).filter(Vote.category_id == c.id).delete(synchronize_session=False)
    db.query(Nomination).filter(Nomination.category_id == c.id).delete(synchronize_session=False)
    db.delete(c)
    db.commit()
    remove_image(image)

    write_log(db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": category_id})
    return {"message": f"Category '{title}' deleted"}


def _set_status(db: Session, category_id: int, new_status: str, current_user: Staff, request: Request) -> CategoryOut:
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")

    old_status = c.status
    c.status = new_status
    db.commit()
    db.refresh(c)

    write_log(db, user_id=current_user.id, action="CATEGORY_STATUS", resource="categories",
              status="SUCCESS", ip=client_ip(request),
              meta={"id": c.id, "from": old_status, "to": new_status})
    return category_to_out(c)


@router.post("/{category_id}/publish", response_model=CategoryOut)
def publish_category(category_id: int, request: Request, db: Session = Depends(get_db),
                     current_user: Staff = Depends(require_admin)):
    return _set_status(db, category_id, CategoryStatus.PUBLISHED.value, current_user, request)


@router.post("/{category_id}/close", response_model=CategoryOut)
def close_category(category_id: int, request: Request, db: Session = Depends(get_db),
                   current_user: Staff = Depends(require_admin)):
    return _set_status(db, category_id, CategoryStatus.CLOSED.value, current_user, request)


# The voting ballot: finalists of a category
@router.get("/{category_id}/finalists", response_model=FinalistList)
def get_finalists(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[Staff] = Depends(get_optional_user),
):
    category = get_visible_category(db, category_id, current_user)
    return {"category_id": category.id, "items": nominees_with_counts(db, category.id, finalists_only=True)}


# Publish the winner and close the category (Admin only)
@router.post("/{category_id}/winner", response_model=CategoryOut)
def publish_winner(
    category_id: int,
    request: Request,
    payload: Optional[WinnerPublish] = None,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    c = db.query(Category).filter(Category.id == category_id).first()
    if not c:
        raise HTTPException(status_code=404, detail="Category not found")

    leader, votes = leading_nominee(db, c.id)
    if leader is None:
        raise HTTPException(status_code=400, detail="Category has no votes yet")

    winner_id = payload.nominee_id if payload and payload.nominee_id else leader.id
    if winner_id != leader.id:
        received = db.query(Vote.id).filter(Vote.category_id == c.id, Vote.nominee_id == winner_id).first()
        if not received:
            raise HTTPException(status_code=400, detail="Winner must be a nominee who received votes")

    c.winner_id = winner_id
    c.winner_published_at = utcnow()
    c.status = CategoryStatus.CLOSED.value
    db.commit()
    db.refresh(c)

    write_log(db, user_id=current_user.id, action="WINNER_PUBLISH", resource="categories",
              status="SUCCESS", ip=client_ip(request), meta={"id": c.id, "winner_id": winner_id})
    return category_to_out(c)
