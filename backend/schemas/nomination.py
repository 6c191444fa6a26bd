from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from schemas.common import ORMBase
from schemas.staff import StaffBrief
from schemas.category import CategoryBrief

# Input schema for nominating a colleague
class NominationCreate(BaseModel):
    category_id: int
    nominee_id: int
    reason: str = Field(min_length=1)

# Output schema with nominee and category embedded
class NominationOut(ORMBase):
    id: int
    category_id: int
    nominee_id: int
    nominator_id: Optional[int] = None
    reason: Optional[str] = None
    status: str
    is_finalist: bool
    submitted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    nominee: StaffBrief
    category: CategoryBrief

# Nomination as seen by its author
class MyNominationOut(NominationOut):
    can_cancel: bool

class NominationPage(BaseModel):
    items: List[NominationOut]
    total: int
    page: int
    page_size: int

# Schema for admin review decisions
class NominationStatusUpdate(BaseModel):
    status: Literal["approved", "rejected", "shortlisted"]

class NominationCounts(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    shortlisted: int

class LeaderboardItem(BaseModel):
    nominee: StaffBrief
    category: CategoryBrief
    count: int

# Body for confirming finalists
class FinalistSelection(BaseModel):
    nominee_ids: List[int] = Field(min_length=1)
