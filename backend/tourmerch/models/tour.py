"""
Tour model: a named run of shows owned by one user.
"""

from sqlalchemy import Column, Date, ForeignKey, Integer, String

from tourmerch.db.base import Base, TimestampMixin


class Tour(Base, TimestampMixin):
    __tablename__ = "tours"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    band_name = Column(String(255), nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name={self.name}, user={self.user_id})>"
