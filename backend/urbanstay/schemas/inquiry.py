# backend/urbanstay/schemas/inquiry.py
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from urbanstay.db.enums import InquiryStatus, InquiryType
from urbanstay.schemas.property import PropertySummary
from urbanstay.schemas.user import UserSummary


class InquiryCreate(BaseModel):
    property_id: int
    message: str = Field(min_length=1, max_length=1000)
    inquiry_type: InquiryType = InquiryType.GENERAL
    preferred_visit_date: Optional[date] = None
    preferred_visit_time: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None


class InquiryReply(BaseModel):
    message: str = Field(min_length=1, max_length=1000)


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus


class InquiryResponseOut(BaseModel):
    id: int
    message: str
    responder_id: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class InquiryOut(BaseModel):
    id: int
    property_id: int
    sender_id: int
    receiver_id: int
    message: str
    inquiry_type: InquiryType
    preferred_visit_date: Optional[date] = None
    preferred_visit_time: Optional[str] = None
    status: InquiryStatus
    phone: Optional[str] = None
    email: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    property: Optional[PropertySummary] = None
    sender: Optional[UserSummary] = None
    receiver: Optional[UserSummary] = None
    responses: List[InquiryResponseOut] = []

    model_config = {"from_attributes": True}
