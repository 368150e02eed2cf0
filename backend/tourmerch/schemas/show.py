"""
Pydantic schemas for shows and show summaries.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ShowCreate(BaseModel):
    tour_id: int
    date: date
    venue: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)


class ShowResponse(BaseModel):
    id: int
    tour_id: int
    date: date
    venue: str
    city: str
    state: str

    model_config = {"from_attributes": True}


class ShowCreatedResponse(BaseModel):
    message: str
    show: ShowResponse


class ClosedShowResponse(BaseModel):
    show_id: int
    venue: str
    date: date
    tour_id: int
    tour_name: str
    band_name: str
    total_sales: Decimal
    total_transactions: int


class BestSeller(BaseModel):
    name: str
    total_sold: int


class ItemSold(BaseModel):
    name: str
    size: Optional[str] = None
    total_sold: int


class ShowSummaryResponse(BaseModel):
    id: int
    show_id: int
    total_sales: Decimal
    total_cash: Decimal
    total_card: Decimal
    total_transactions: int
    best_selling_items: list[BestSeller]
    items_sold: list[ItemSold]
    created_at: datetime
    venue: str
    date: date
    tour_name: str
    band_name: str
