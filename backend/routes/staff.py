# backend/routes/staff.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category
from models.nomination import Nomination
from models.staff import Staff
from models.vote import Vote
from schemas.common import MessageResponse
from schemas.staff import RoleUpdate, StaffOut, StaffPage
from utils.audit import client_ip, write_log
from utils.storage import STAFF_AVATARS, remove_image, save_image
from utils.tokenJWT import get_current_user, require_admin

router = APIRouter(prefix="/staff", tags=["Staff"])


def _get_staff_or_404(db: Session, staff_id: int) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Staff member not found")
    return staff


def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(Staff).filter(func.lower(Staff.email) == email)
    if exclude_id is not None:
        q = q.filter(Staff.id != exclude_id)
    return q.first() is not None


# Retrieve staff with search, filtering, sorting, and pagination
@router.get("", response_model=StaffPage)
def list_staff(
    q: Optional[str] = Query(None, description="Search by name, email or department"),
    department: Optional[str] = Query(None),
    role: Optional[Literal["staff", "admin"]] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "name", "email", "department", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    query = db.query(Staff)

    if q:
        like = f"%{q}%"
        query = query.filter(or_(Staff.name.ilike(like), Staff.email.ilike(like), Staff.department.ilike(like)))
    if department:
        query = query.filter(Staff.department == department)
    if role:
        query = query.filter(Staff.role == role)

    sort_map = {
        "id": Staff.id,
        "name": Staff.name,
        "email": Staff.email,
        "department": Staff.department,
        "created_at": Staff.created_at,
    }
    col = sort_map.get(sort_by, Staff.name)
    query = query.order_by(col.asc() if order == "asc" else col.desc(), Staff.id.asc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": items, "total": total, "page": page, "page_size": page_size}


# Quick lookup used by the nomination form
@router.get("/search", response_model=List[StaffOut])
def search_staff(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(get_current_user),
):
    like = f"%{q}%"
    return (
        db.query(Staff)
        .filter(or_(Staff.name.ilike(like), Staff.email.ilike(like)))
        .order_by(Staff.name.asc())
        .limit(10)
        .all()
    )


# Distinct department strings in use on staff records
@router.get("/departments", response_model=List[str])
def staff_departments(db: Session = Depends(get_db), current_user: Staff = Depends(get_current_user)):
    values = (
        db.query(Staff.department)
        .distinct()
        .filter(Staff.department != None, Staff.department != "")  # noqa: E711
        .all()
    )
    return sorted(v[0] for v in values)


@router.get("/{staff_id}", response_model=StaffOut)
def get_staff(staff_id: int, db: Session = Depends(get_db), current_user: Staff = Depends(get_current_user)):
    return _get_staff_or_404(db, staff_id)


# Create a staff record (Admin only)
@router.post("", response_model=StaffOut, status_code=201)
def create_staff(
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
    file: Optional[UploadFile] = File(None),
    name: str = Form(...),
    email: str = Form(...),
    position: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    role: Literal["staff", "admin"] = Form("staff"),
):
    normalized_email = email.strip().lower()
    if "@" not in normalized_email:
        raise HTTPException(status_code=400, detail="Invalid email address")
    if _email_taken(db, normalized_email):
        raise HTTPException(status_code=409, detail="A staff member with this email already exists")

    avatar_url = save_image(STAFF_AVATARS, file) if file else None

    staff = Staff(
        name=name.strip(), email=normalized_email, position=position,
        department=department, role=role, avatar=avatar_url,
    )
    db.add(staff)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        remove_image(avatar_url)
        raise HTTPException(status_code=409, detail="A staff member with this email already exists")
    db.refresh(staff)

    write_log(db, user_id=current_user.id, action="STAFF_CREATE", resource="staff",
              status="SUCCESS", ip=client_ip(request), meta={"id": staff.id, "email": staff.email})
    return staff


# Partially update a staff record (Admin only)
@router.patch("/{staff_id}", response_model=StaffOut)
def edit_staff(
    staff_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
    file: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    department: Optional[str] = Form(None),
    role: Optional[Literal["staff", "admin"]] = Form(None),
):
    staff = _get_staff_or_404(db, staff_id)
    if staff.id == current_user.id and role is not None and role != "admin":
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")

    if email is not None:
        normalized_email = email.strip().lower()
        if normalized_email != staff.email and _email_taken(db, normalized_email, exclude_id=staff.id):
            raise HTTPException(status_code=409, detail="A staff member with this email already exists")
        staff.email = normalized_email
    if name is not None: staff.name = name.strip()
    if position is not None: staff.position = position
    if department is not None: staff.department = department
    if role is not None: staff.role = role

    if file:
        new_url = save_image(STAFF_AVATARS, file)
        remove_image(staff.avatar)
        staff.avatar = new_url

    db.commit()
    db.refresh(staff)

    write_log(db, user_id=current_user.id, action="STAFF_EDIT", resource="staff",
              status="SUCCESS", ip=client_ip(request), meta={"id": staff.id})
    return staff


# Update staff role (Admin only)
@router.put("/{staff_id}/role", response_model=StaffOut)
def update_staff_role(
    staff_id: int,
    payload: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    staff = _get_staff_or_404(db, staff_id)
    if staff.id == current_user.id and payload.role != "admin":
        raise HTTPException(status_code=400, detail="You cannot remove your own admin role")

    staff.role = payload.role
    db.commit()
    db.refresh(staff)

    write_log(db, user_id=current_user.id, action="STAFF_ROLE", resource="staff",
              status="SUCCESS", ip=client_ip(request), meta={"id": staff.id, "role": staff.role})
    return staff


# Delete a staff record (Admin only)
@router.delete("/{staff_id}", response_model=MessageResponse)
def delete_staff(
    staff_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    staff = _get_staff_or_404(db, staff_id)

    # Prevent self-deletion
    if staff.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    # Nominees and published winners keep the awards history intact
    referenced = (
        db.query(Nomination.id).filter(Nomination.nominee_id == staff.id).first()
        or db.query(Vote.id).filter(Vote.nominee_id == staff.id).first()
        or db.query(Category.id).filter(Category.winner_id == staff.id).first()
    )
    if referenced:
        write_log(db, user_id=current_user.id, action="STAFF_DELETE", resource="staff",
                  status="FAIL", ip=client_ip(request), meta={"id": staff.id, "reason": "referenced"})
        raise HTTPException(
            status_code=409,
            detail="Staff member has nominations, votes or awards and cannot be deleted",
        )

    # Authored nominations stay, anonymised; cast votes go
    db.query(Nomination).filter(Nomination.nominator_id == staff.id).update(
        {Nomination.nominator_id: None}, synchronize_session=False
    )
    db.query(Vote).filter(Vote.voter_id == staff.id).delete(synchronize_session=False)

    sid, email, avatar = staff.id, staff.email, staff.avatar
    db.delete(staff)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=409,
            detail="Staff member has nominations, votes or awards and cannot be deleted",
        )
    remove_image(avatar)

    write_log(db, user_id=current_user.id, action="STAFF_DELETE", resource="staff",
              status="SUCCESS", ip=client_ip(request), meta={"id": sid})
    return {"message": f"Staff member {email} has been deleted"}
