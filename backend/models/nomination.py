# backend/models/nomination.py
import enum
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base

# Review state of a nomination
class NominationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SHORTLISTED = "shortlisted"

# A staff member's proposal of a colleague for a category award
class Nomination(Base):
    __tablename__ = "nominations"
    __table_args__ = (
        # One nomination per nominator for a given colleague and category
        UniqueConstraint("category_id", "nominee_id", "nominator_id", name="uq_nominations_category_nominee_nominator"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'shortlisted')", name="ck_nominations_status"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    nominee_id = Column(Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False, index=True)
    nominator_id = Column(Integer, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True, index=True)
    reason = Column(String, nullable=True)
    status = Column(String, nullable=False, default=NominationStatus.PENDING.value, index=True)

    # Shortlisting flag, independent of the "shortlisted" status
    is_finalist = Column(Boolean, nullable=False, default=False, index=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="nominations")
    nominee = relationship("Staff", foreign_keys=[nominee_id], lazy="joined")
    nominator = relationship("Staff", foreign_keys=[nominator_id])
