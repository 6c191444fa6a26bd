# backend/routes/feedback.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.feedback import Feedback, FeedbackStatus
from models.staff import Staff
from schemas.common import MessageResponse
from schemas.feedback import (
    FeedbackCounts, FeedbackCreate, FeedbackKind, FeedbackOut, FeedbackState, FeedbackStatusUpdate,
)
from utils.audit import client_ip, write_log
from utils.tokenJWT import get_optional_user, require_admin

router = APIRouter(prefix="/feedback", tags=["Feedback"])


def _get_feedback_or_404(db: Session, feedback_id: int) -> Feedback:
    item = db.query(Feedback).filter(Feedback.id == feedback_id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Feedback not found")
    return item


# Submit feedback; anonymous visitors must leave an email
@router.post("", response_model=FeedbackOut, status_code=201)
def submit_feedback(
    payload: FeedbackCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Optional[Staff] = Depends(get_optional_user),
):
    email = payload.user_email or (current_user.email if current_user else None)
    if not email:
        raise HTTPException(status_code=400, detail="An email address is required")

    item = Feedback(
        user_id=current_user.id if current_user else None,
        user_email=str(email).lower(),
        user_name=payload.user_name or (current_user.name if current_user else None),
        type=payload.type,
        message=payload.message.strip(),
        status=FeedbackStatus.NEW.value,
    )
    db.add(item)
    db.commit()
    db.refresh(item)

    write_log(db, user_id=item.user_id, action="FEEDBACK_CREATE", resource="feedback",
              status="SUCCESS", ip=client_ip(request), meta={"id": item.id, "type": item.type})
    return item


@router.get("", response_model=List[FeedbackOut])
def list_feedback(
    status: Optional[FeedbackState] = Query(None),
    type: Optional[FeedbackKind] = Query(None),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    query = db.query(Feedback)
    if status:
        query = query.filter(Feedback.status == status)
    if type:
        query = query.filter(Feedback.type == type)
    return query.order_by(Feedback.created_at.desc(), Feedback.id.desc()).all()


@router.get("/counts", response_model=FeedbackCounts)
def feedback_counts(db: Session = Depends(get_db), current_user: Staff = Depends(require_admin)):
    counts = dict(db.query(Feedback.status, func.count(Feedback.id)).group_by(Feedback.status).all())
    return FeedbackCounts(
        new=counts.get("new", 0),
        reviewed=counts.get("reviewed", 0),
        resolved=counts.get("resolved", 0),
        total=sum(counts.values()),
    )


@router.put("/{feedback_id}/status", response_model=FeedbackOut)
def update_feedback_status(
    feedback_id: int,
    payload: FeedbackStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    item = _get_feedback_or_404(db, feedback_id)
    item.status = payload.status
    db.commit()
    db.refresh(item)

    write_log(db, user_id=current_user.id, action="FEEDBACK_STATUS", resource="feedback",
              status="SUCCESS", ip=client_ip(request), meta={"id": item.id, "status": item.status})
    return item


@router.delete("/{feedback_id}", response_model=MessageResponse)
def delete_feedback(
    feedback_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    item = _get_feedback_or_404(db, feedback_id)
    db.delete(item)
    db.commit()

    write_log(db, user_id=current_user.id, action="FEEDBACK_DELETE", resource="feedback",
              status="SUCCESS", ip=client_ip(request), meta={"id": feedback_id})
    return {"message": "Feedback deleted"}
