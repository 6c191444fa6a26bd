# backend/models/staff.py
from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint, func
from database import Base

STAFF_ROLES = ("staff", "admin")

# Represents an employee: nominee, nominator, voter and (with role=admin) administrator
class Staff(Base):
    __tablename__ = "staff"
    __table_args__ = (
        CheckConstraint("role IN ('staff', 'admin')", name="ck_staff_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    position = Column(String, nullable=True)
    # Free text; not a foreign key to departments
    department = Column(String, nullable=True, index=True)
    avatar = Column(String, nullable=True)
    role = Column(String, nullable=False, default="staff")

    # Empty for accounts that only sign in with Google or a magic link
    password_hash = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"
