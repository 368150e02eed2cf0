"""
Inventory models: items, per-size stock rows and bundle composition.

Key design decisions:
- ``quantity`` on the item is the stock of a hard item and the derived
  displayed quantity of a bundle; soft items keep their stock in
  ``inventory_sizes`` and leave it null
- (tour_id, name, type) is unique so two concurrent creates cannot both win
- CHECK constraints keep every stock column non-negative at the DB level
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)

from tourmerch.db.base import Base, TimestampMixin

ITEM_TYPES = ("hard", "soft", "bundle")


class InventoryItem(Base, TimestampMixin):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    tour_id = Column(Integer, ForeignKey("tours.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(10), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    quantity = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("tour_id", "name", "type", name="uq_inventory_tour_name_type"),
        CheckConstraint("type IN ('hard', 'soft', 'bundle')", name="check_inventory_type"),
        CheckConstraint("quantity IS NULL OR quantity >= 0", name="check_inventory_quantity_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<InventoryItem(id={self.id}, name={self.name}, type={self.type})>"


class InventorySize(Base):
    __tablename__ = "inventory_sizes"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    size = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("inventory_id", "size", name="uq_inventory_size"),
        CheckConstraint("quantity >= 0", name="check_size_quantity_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<InventorySize(item={self.inventory_id}, size={self.size}, qty={self.quantity})>"


class BundleItem(Base):
    __tablename__ = "bundle_items"

    id = Column(Integer, primary_key=True, index=True)
    bundle_id = Column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    # component availability captured when the bundle was created
    quantity = Column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<BundleItem(bundle={self.bundle_id}, item={self.item_id}, qty={self.quantity})>"
