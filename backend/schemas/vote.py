from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from schemas.common import ORMBase

class VoteCreate(BaseModel):
    category_id: int
    nominee_id: int

class VoteOut(ORMBase):
    id: int
    voter_id: int
    category_id: int
    nominee_id: int
    voted_at: Optional[datetime] = None

class VoteCount(BaseModel):
    nominee_id: int
    count: int

class HasVoted(BaseModel):
    category_id: int
    has_voted: bool

class VoteTotal(BaseModel):
    total: int
