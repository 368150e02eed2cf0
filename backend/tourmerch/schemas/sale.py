"""
Pydantic schemas for sale recording and reporting.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from tourmerch.schemas.inventory import SizeQuantity

PaymentMethod = Literal["cash", "card", "free"]


class SaleCreate(BaseModel):
    inventory_id: int
    show_id: int
    quantity_sold: int = Field(..., gt=0)
    total_amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod
    size: Optional[str] = Field(None, min_length=1, max_length=20)


class BundleSaleCreate(BaseModel):
    bundle_id: int
    show_id: int
    quantity_sold: int = Field(..., gt=0)
    payment_method: PaymentMethod = "cash"
    size: Optional[str] = Field(None, min_length=1, max_length=20)


class SaleResponse(BaseModel):
    id: int
    inventory_id: Optional[int]
    show_id: int
    quantity_sold: int
    total_amount: Decimal
    payment_method: str
    size: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class SaleRecordedResponse(BaseModel):
    message: str
    sale: SaleResponse


class SaleListItem(BaseModel):
    id: int
    inventory_id: Optional[int]
    quantity_sold: int
    total_amount: Decimal
    payment_method: str
    size: Optional[str]
    created_at: datetime
    item_name: Optional[str]
    type: Optional[str]
    price: Optional[Decimal]
    sizes: Optional[list[SizeQuantity]] = None


class TourSalesTotal(BaseModel):
    tour_id: int
    total_sales: Decimal
