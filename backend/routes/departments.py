# backend/routes/departments.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.department import Department
from models.staff import Staff
from schemas.common import MessageResponse
from schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from utils.audit import client_ip, write_log
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/departments", tags=["Departments"])
logger = logging.getLogger(__name__)


def _get_department_or_404(db: Session, department_id: int) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


def _commit_unique(db: Session, name: str) -> None:
    # The unique index on name is the guard; concurrent creates land here too
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Department name conflict: %s", name)
        raise HTTPException(status_code=409, detail=f"Department '{name}' already exists")


# List departments alphabetically
@router.get("", response_model=List[DepartmentOut])
def list_departments(db: Session = Depends(get_db)):
    return db.query(Department).order_by(Department.name.asc()).all()


# Create a department (Admin only)
@router.post("", response_model=DepartmentOut, status_code=201)
def create_department(
    payload: DepartmentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    name = payload.name.strip()
    department = Department(name=name, description=payload.description)
    db.add(department)
    _commit_unique(db, name)
    db.refresh(department)

    write_log(db, user_id=current_user.id, action="DEPARTMENT_CREATE", resource="departments",
              status="SUCCESS", ip=client_ip(request), meta={"id": department.id, "name": name})
    return department


# Rename or describe a department (Admin only); staff records are not rewritten
@router.patch("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    department = _get_department_or_404(db, department_id)

    if payload.name is not None:
        department.name = payload.name.strip()
    if payload.description is not None:
        department.description = payload.description
    _commit_unique(db, department.name)
    db.refresh(department)

    write_log(db, user_id=current_user.id, action="DEPARTMENT_UPDATE", resource="departments",
              status="SUCCESS", ip=client_ip(request), meta={"id": department.id})
    return department


# Delete a department (Admin only); refused while staff still belong to it
@router.delete("/{department_id}", response_model=MessageResponse)
def delete_department(
    department_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    department = _get_department_or_404(db, department_id)

    members = (
        db.query(func.count(Staff.id))
        .filter(func.lower(Staff.department) == department.name.lower())
        .scalar()
    )
    if members:
        write_log(db, user_id=current_user.id, action="DEPARTMENT_DELETE", resource="departments",
                  status="FAIL", ip=client_ip(request), meta={"id": department.id, "staff": members})
        raise HTTPException(
            status_code=409,
            detail=f"Department '{department.name}' still has {members} staff member(s)",
        )

    name = department.name
    db.delete(department)
    db.commit()

    write_log(db, user_id=current_user.id, action="DEPARTMENT_DELETE", resource="departments",
              status="SUCCESS", ip=client_ip(request), meta={"id": department_id})
    return {"message": f"Department '{name}' deleted"}
