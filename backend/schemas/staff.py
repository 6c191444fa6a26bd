# backend/schemas/staff.py
from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, EmailStr

from schemas.common import ORMBase


# Compact staff card embedded in nominations, ballots and results
class StaffBrief(ORMBase):
    id: int
    name: str
    email: EmailStr
    position: Optional[str] = None
    department: Optional[str] = None
    avatar: Optional[str] = None


# Full staff record
class StaffOut(StaffBrief):
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Paginated response for staff listings
class StaffPage(ORMBase):
    items: List[StaffOut]
    total: int
    page: int
    page_size: int


# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Literal["staff", "admin"]
