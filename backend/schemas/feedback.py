from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

from schemas.common import ORMBase

FeedbackKind = Literal["bug", "feature", "improvement", "other"]
FeedbackState = Literal["new", "reviewed", "resolved"]

# Input schema; email and name fall back to the signed-in profile
class FeedbackCreate(BaseModel):
    type: FeedbackKind
    message: str = Field(min_length=1)
    user_email: Optional[EmailStr] = None
    user_name: Optional[str] = None

class FeedbackOut(ORMBase):
    id: int
    user_id: Optional[int] = None
    user_email: str
    user_name: Optional[str] = None
    type: str
    message: str
    status: str
    created_at: Optional[datetime] = None

class FeedbackStatusUpdate(BaseModel):
    status: FeedbackState

class FeedbackCounts(BaseModel):
    new: int
    reviewed: int
    resolved: int
    total: int
