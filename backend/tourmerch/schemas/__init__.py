from tourmerch.schemas.user import UserCreate, UserLogin, UserResponse, AuthResponse
from tourmerch.schemas.tour import TourCreate, TourUpdate, TourResponse
from tourmerch.schemas.show import ShowCreate, ShowResponse, ShowSummaryResponse
from tourmerch.schemas.inventory import InventoryCreate, InventoryUpdate, InventoryItemResponse, BundleCreate
from tourmerch.schemas.sale import SaleCreate, BundleSaleCreate, SaleResponse

__all__ = [
    "UserCreate", "UserLogin", "UserResponse", "AuthResponse",
    "TourCreate", "TourUpdate", "TourResponse",
    "ShowCreate", "ShowResponse", "ShowSummaryResponse",
    "InventoryCreate", "InventoryUpdate", "InventoryItemResponse", "BundleCreate",
    "SaleCreate", "BundleSaleCreate", "SaleResponse",
]
