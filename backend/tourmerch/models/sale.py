"""
Sale model: one recorded transaction against a show.

``inventory_id`` is nulled when the item is later deleted so that the
financial history of a show survives inventory cleanup.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String

from tourmerch.db.base import Base, TimestampMixin

PAYMENT_METHODS = ("cash", "card", "free")


class Sale(Base, TimestampMixin):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory.id", ondelete="SET NULL"), nullable=True)
    show_id = Column(Integer, ForeignKey("shows.id"), nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(10), nullable=False)
    size = Column(String(20), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity_sold > 0", name="check_sale_quantity_positive"),
        CheckConstraint("total_amount >= 0", name="check_sale_amount_non_negative"),
        CheckConstraint("payment_method IN ('cash', 'card', 'free')", name="check_sale_payment_method"),
        # every summary and listing query filters by show
        Index("ix_sales_show_id", "show_id"),
        Index("ix_sales_inventory_id", "inventory_id"),
    )

    def __repr__(self) -> str:
        return f"<Sale(id={self.id}, item={self.inventory_id}, show={self.show_id}, qty={self.quantity_sold})>"
