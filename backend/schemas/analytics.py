# backend/schemas/analytics.py
from typing import Optional
from pydantic import BaseModel

# Dashboard summary
class AnalyticsOverview(BaseModel):
    total_nominations: int
    total_votes: int
    total_staff: int
    total_categories: int
    pending_nominations: int
    approved_nominations: int
    rejected_nominations: int
    shortlisted_nominations: int
    participation_rate: int

class StatusBreakdown(BaseModel):
    status: str
    count: int
    percentage: int

class DepartmentBreakdown(BaseModel):
    department: str
    count: int
    percentage: int

class CategoryBreakdown(BaseModel):
    category_id: Optional[int] = None
    category_title: str
    count: int
    percentage: int

class VotesByCategory(BaseModel):
    category_id: Optional[int] = None
    category_title: str
    vote_count: int

class TopNominee(BaseModel):
    nominee_id: int
    nominee_name: str
    department: str
    avatar: Optional[str] = None
    nomination_count: int

class TopVoted(BaseModel):
    nominee_id: int
    nominee_name: str
    category_title: str
    vote_count: int
    avatar: Optional[str] = None

class DepartmentEngagement(BaseModel):
    department: str
    staff_count: int
    nominations_received: int
    votes_received: int
    engagement_score: int
