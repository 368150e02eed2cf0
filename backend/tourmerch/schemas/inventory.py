"""
Pydantic schemas for inventory items, sizes and bundles.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field


class SizeQuantity(BaseModel):
    size: str = Field(..., min_length=1, max_length=20)
    quantity: int = Field(..., ge=0)

    model_config = {"from_attributes": True}


class InventoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: Literal["hard", "soft"]
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    tour_id: int
    image_url: Optional[str] = Field(None, max_length=500)
    quantity: Optional[int] = Field(None, ge=0)
    sizes: Optional[list[SizeQuantity]] = None


class InventoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=500)
    quantity: Optional[int] = Field(None, ge=0)
    sizes: Optional[list[SizeQuantity]] = None


class StockAdjust(BaseModel):
    inventory_id: int
    new_quantity: int = Field(..., ge=0)
    new_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class BundleComponentRef(BaseModel):
    item_id: int


class BundleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    tour_id: int
    image_url: Optional[str] = Field(None, max_length=500)
    items: list[BundleComponentRef] = Field(..., min_length=1)


class BundleComponentResponse(BaseModel):
    id: int
    name: str
    type: str
    price: Decimal
    image_url: Optional[str] = None
    quantity: int
    sizes: Optional[list[SizeQuantity]] = None


class InventoryItemResponse(BaseModel):
    id: int
    tour_id: int
    name: str
    type: str
    price: Decimal
    image_url: Optional[str] = None
    quantity: Optional[int] = None
    created_at: datetime
    sizes: Optional[list[SizeQuantity]] = None
    items: Optional[list[BundleComponentResponse]] = None


class InventoryWriteResponse(BaseModel):
    message: str
    inventory: InventoryItemResponse


class BundleCreatedResponse(BaseModel):
    message: str
    bundle_id: int
    quantity: int


class BundleDetailResponse(BaseModel):
    bundle: InventoryItemResponse
    items: list[BundleComponentResponse]
