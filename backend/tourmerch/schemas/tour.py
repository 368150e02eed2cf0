"""
Pydantic schemas for tours.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TourCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    band_name: str = Field(..., min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TourUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    band_name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class TourResponse(BaseModel):
    id: int
    user_id: int
    name: str
    band_name: str
    start_date: Optional[date]
    end_date: Optional[date]
    created_at: datetime

    model_config = {"from_attributes": True}


class TourUpdateResponse(BaseModel):
    message: str
    tour: TourResponse
