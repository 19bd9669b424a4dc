# backend/urbanstay/schemas/alert.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from urbanstay.db.enums import AlertFrequency, ListingType, PropertyType


class AlertCriteria(BaseModel):
    listing_type: Optional[ListingType] = None
    property_types: List[PropertyType] = []
    cities: List[str] = []
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    min_bedrooms: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price cannot exceed max_price")
        return self


class AlertCreate(AlertCriteria):
    name: str = Field(min_length=1, max_length=100)
    frequency: AlertFrequency = AlertFrequency.DAILY


class AlertUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    listing_type: Optional[ListingType] = None
    property_types: Optional[List[PropertyType]] = None
    cities: Optional[List[str]] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    min_bedrooms: Optional[int] = Field(default=None, ge=0)
    frequency: Optional[AlertFrequency] = None
    is_active: Optional[bool] = None


class AlertOut(BaseModel):
    id: int
    user_id: int
    name: str
    listing_type: Optional[ListingType] = None
    property_types: List[PropertyType] = []
    cities: List[str] = []
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    frequency: AlertFrequency
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
