import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, func
from database import Base

class FeedbackType(str, enum.Enum):
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    OTHER = "other"

class FeedbackStatus(str, enum.Enum):
    NEW = "new"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"

# Product feedback left by signed-in or anonymous users
class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (
        CheckConstraint("type IN ('bug', 'feature', 'improvement', 'other')", name="ck_feedback_type"),
        CheckConstraint("status IN ('new', 'reviewed', 'resolved')", name="ck_feedback_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True)
    user_email = Column(String, nullable=False)
    user_name = Column(String, nullable=True)
    type = Column(String, nullable=False)
    message = Column(String, nullable=False)
    status = Column(String, nullable=False, default=FeedbackStatus.NEW.value, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
