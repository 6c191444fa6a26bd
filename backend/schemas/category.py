# backend/schemas/category.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from schemas.common import ORMBase
from schemas.staff import StaffBrief


# Category as returned to clients; phase is derived, never stored
class CategoryOut(ORMBase):
    id: int
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    type: str
    department: Optional[str] = None
    status: str
    nomination_start: Optional[datetime] = None
    nomination_deadline: Optional[datetime] = None
    shortlisting_start: Optional[datetime] = None
    shortlisting_end: Optional[datetime] = None
    voting_start: Optional[datetime] = None
    voting_end: Optional[datetime] = None
    winner_id: Optional[int] = None
    winner_published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    phase: str = "upcoming"


# Minimal category reference embedded in nominations
class CategoryBrief(ORMBase):
    id: int
    title: str
    type: str
    status: str
    department: Optional[str] = None
    nomination_deadline: Optional[datetime] = None


# Body for publishing a winner; defaults to the leading nominee
class WinnerPublish(BaseModel):
    nominee_id: Optional[int] = None


# One nominee on the ballot or the shortlisting screen
class NomineeWithCount(BaseModel):
    nominee_id: int
    nominee: StaffBrief
    nomination_count: int
    is_finalist: bool


class FinalistList(BaseModel):
    category_id: int
    items: List[NomineeWithCount]
