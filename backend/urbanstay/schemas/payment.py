# backend/urbanstay/schemas/payment.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from urbanstay.schemas.user import UserSummary


class PaymentProperty(BaseModel):
    id: int
    title: str
    city: str
    locality: Optional[str] = None
    is_featured: bool
    featured_until: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentOut(BaseModel):
    id: int
    transaction_id: str
    property_id: Optional[int] = None
    seller_id: Optional[int] = None
    amount: int
    currency: str
    status: str
    method: str
    plan: str
    featured_until: datetime
    created_at: datetime

    property: Optional[PaymentProperty] = None

    model_config = {"from_attributes": True}


class PaymentAdminOut(PaymentOut):
    seller: Optional[UserSummary] = None
