# backend/models/category.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Publication state of an award category
class CategoryStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"

# Kind of award handed out in the category
class CategoryType(str, enum.Enum):
    INDIVIDUAL = "Individual Award"
    TEAM = "Team Award"

# Represents an award category with its nomination, shortlisting and voting windows
class Category(Base):
    __tablename__ = "categories"
    __table_args__ = (
        CheckConstraint("status IN ('draft', 'published', 'closed')", name="ck_categories_status"),
        CheckConstraint("type IN ('Individual Award', 'Team Award')", name="ck_categories_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    image = Column(String, nullable=True)
    type = Column(String, nullable=False, default=CategoryType.INDIVIDUAL.value)
    department = Column(String, nullable=True)
    status = Column(String, nullable=False, default=CategoryStatus.DRAFT.value, index=True)

    # Windows, stored as naive UTC
    nomination_start = Column(DateTime, nullable=True)
    nomination_deadline = Column(DateTime, nullable=True)
    shortlisting_start = Column(DateTime, nullable=True)
    shortlisting_end = Column(DateTime, nullable=True)
    voting_start = Column(DateTime, nullable=True)
    voting_end = Column(DateTime, nullable=True)

    # Published result
    winner_id = Column(Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=True)
    winner_published_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    winner = relationship("Staff", lazy="joined", uselist=False)
    nominations = relationship("Nomination", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)
    votes = relationship("Vote", back_populates="category", cascade="all, delete-orphan", passive_deletes=True)
