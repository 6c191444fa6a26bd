from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from schemas.common import ORMBase

class DepartmentCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None

# Partial update; omitted fields are left as they are
class DepartmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None

class DepartmentOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
