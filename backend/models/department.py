from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base

# Lookup table feeding staff and category department pickers
class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
