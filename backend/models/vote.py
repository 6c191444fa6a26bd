from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A voter's choice of nominee in a category; the (voter, category) pair is unique
class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("voter_id", "category_id", name="uq_votes_voter_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    voter_id = Column(Integer, ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    nominee_id = Column(Integer, ForeignKey("staff.id", ondelete="RESTRICT"), nullable=False, index=True)
    voted_at = Column(DateTime(timezone=True), server_default=func.now())

    category = relationship("Category", back_populates="votes")
    nominee = relationship("Staff", foreign_keys=[nominee_id])
    voter = relationship("Staff", foreign_keys=[voter_id])
