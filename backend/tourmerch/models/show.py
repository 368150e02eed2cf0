"""
Show and ShowSummary models.

A show is open until its summary row exists. The unique constraint on
``show_summaries.show_id`` guarantees a show can only be closed once.
"""

from sqlalchemy import JSON, Column, Date, ForeignKey, Integer, Numeric, String

from tourmerch.db.base import Base, TimestampMixin


class Show(Base, TimestampMixin):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    venue = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Show(id={self.id}, venue={self.venue}, date={self.date})>"


class ShowSummary(Base, TimestampMixin):
    __tablename__ = "show_summaries"

    id = Column(Integer, primary_key=True, index=True)
    show_id = Column(Integer, ForeignKey("shows.id"), nullable=False, unique=True)
    total_sales = Column(Numeric(12, 2), nullable=False, default=0)
    total_cash = Column(Numeric(12, 2), nullable=False, default=0)
    total_card = Column(Numeric(12, 2), nullable=False, default=0)
    total_transactions = Column(Integer, nullable=False, default=0)
    best_selling_items = Column(JSON, nullable=False, default=list)  # [{name, total_sold}]
    items_sold = Column(JSON, nullable=False, default=list)  # [{name, size, total_sold}]

    def __repr__(self) -> str:
        return f"<ShowSummary(show={self.show_id}, total={self.total_sales})>"
