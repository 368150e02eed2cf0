from tourmerch.models.user import User
from tourmerch.models.tour import Tour
from tourmerch.models.show import Show, ShowSummary
from tourmerch.models.inventory import InventoryItem, InventorySize, BundleItem
from tourmerch.models.sale import Sale

__all__ = [
    "User", "Tour", "Show", "ShowSummary",
    "InventoryItem", "InventorySize", "BundleItem", "Sale",
]
