"""
User model with secure password storage.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String, Text

from tourmerch.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")  # admin, manager, user
    profile_pic = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'manager', 'user')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
