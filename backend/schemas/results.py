# backend/schemas/results.py
from typing import List, Literal, Optional
from pydantic import BaseModel

from schemas.staff import StaffBrief
from schemas.category import CategoryOut


# Schemas for per-category voting results
class NomineeResult(BaseModel):
    nominee: StaffBrief
    vote_count: int
    percentage: float


class CategoryResult(BaseModel):
    category_id: int
    category: CategoryOut
    nominees: List[NomineeResult]
    total_votes: int
    status: Literal["ongoing", "completed"]
    winner_id: Optional[int] = None


class AdminCategoryResult(CategoryResult):
    leading_nominee_id: Optional[int] = None
