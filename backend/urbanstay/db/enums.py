# urbanstay/db/enums.py
# Stored as plain strings; always persist ``.value``.

from enum import Enum


class UserRole(str, Enum):
    USER = "user"
    SELLER = "seller"
    ADMIN = "admin"


class ListingType(str, Enum):
    SALE = "sale"
    RENT = "rent"


class PropertyType(str, Enum):
    APARTMENT = "apartment"
    HOUSE = "house"
    VILLA = "villa"
    PLOT = "plot"
    COMMERCIAL = "commercial"
    PG = "pg"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"
    RENTED = "rented"


class Furnishing(str, Enum):
    FURNISHED = "furnished"
    SEMI_FURNISHED = "semi-furnished"
    UNFURNISHED = "unfurnished"


class BookingType(str, Enum):
    VISIT = "visit"
    PURCHASE = "purchase"
    RENT = "rent"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class InquiryType(str, Enum):
    GENERAL = "general"
    SCHEDULE_VISIT = "schedule-visit"
    PRICE_NEGOTIATION = "price-negotiation"
    DOCUMENTS = "documents"
    OTHER = "other"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AlertFrequency(str, Enum):
    INSTANT = "instant"
    DAILY = "daily"
    WEEKLY = "weekly"
