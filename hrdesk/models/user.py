from enum import Enum
from typing import Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Float, Integer, String, func

from ..database import Base


class UserRole(str, Enum):
    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["UserRole"]:
        try:
            return cls(value)
        except ValueError:
            return None


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN ('employee', 'hr', 'admin')",
            name="ck_users_role",
        ),
    )
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.EMPLOYEE.value)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_fired = Column(Boolean, nullable=False, default=False)
    salary = Column(Float, nullable=False, default=0)

    name = Column(String(100), nullable=True)
    photo = Column(String(500), nullable=True)  # URL
    designation = Column(String(100), nullable=True)
    bank_account = Column(String(64), nullable=True)
    extra = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"
