# backend/urbanstay/schemas/booking.py
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from urbanstay.db.enums import BookingStatus, BookingType
from urbanstay.schemas.property import PropertySummary
from urbanstay.schemas.user import UserSummary


class BookingCreate(BaseModel):
    property_id: int
    booking_type: BookingType
    visit_date: date
    visit_time: str = Field(min_length=1, max_length=50)
    message: Optional[str] = Field(default=None, max_length=500)
    price_negotiated: Optional[float] = Field(default=None, ge=0)


class SellerConfirm(BaseModel):
    note: Optional[str] = Field(default=None, max_length=500)


class BookingOut(BaseModel):
    id: int
    property_id: int
    buyer_id: int
    seller_id: int
    booking_type: BookingType
    status: BookingStatus
    # pending | awaiting_buyer | buyer_confirmed | completed | cancelled
    stage: str
    visit_date: date
    visit_time: str
    price_negotiated: Optional[float] = None
    buyer_message: str = ""
    seller_confirmation_note: Optional[str] = None
    seller_confirmed_at: Optional[datetime] = None
    buyer_confirmed_at: Optional[datetime] = None
    confirmation_token: str
    created_at: datetime
    updated_at: datetime

    property: Optional[PropertySummary] = None
    buyer: Optional[UserSummary] = None
    seller: Optional[UserSummary] = None

    model_config = {"from_attributes": True}
