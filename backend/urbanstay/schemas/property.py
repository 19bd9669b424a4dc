# backend/urbanstay/schemas/property.py
from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, field_validator

from urbanstay.db.enums import Furnishing, ListingType, PropertyStatus, PropertyType


class PropertyImage(BaseModel):
    url: str
    caption: str = ""
    is_primary: bool = False


class OwnerInfo(BaseModel):
    id: int
    name: str
    avatar: str = ""
    phone: Optional[str] = None
    company_name: Optional[str] = None

    model_config = {"from_attributes": True}


class PropertySummary(BaseModel):
    """What a booking or inquiry shows about its listing."""

    id: int
    title: str
    slug: str
    price: float
    city: str
    locality: Optional[str] = None
    address: Optional[str] = None
    images: List[PropertyImage] = []

    model_config = {"from_attributes": True}


class PropertyBase(BaseModel):
    id: int
    owner_id: int
    title: str
    slug: str
    description: Optional[str] = None
    listing_type: ListingType
    property_type: PropertyType
    price: float

    address: Optional[str] = None
    locality: Optional[str] = None
    city: str
    state: Optional[str] = None
    pincode: Optional[str] = None

    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    carpet_area: Optional[float] = None
    furnishing: Optional[Furnishing] = None

    amenities: List[str] = []
    highlights: List[str] = []
    images: List[PropertyImage] = []

    status: PropertyStatus
    is_featured: bool
    featured_until: Optional[datetime] = None
    is_verified: bool
    views: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("amenities", mode="before")
    @classmethod
    def _proxy_to_list(cls, v):
        # association proxy collections are list-like but not lists
        return list(v) if v is not None else []


class PropertyDetail(PropertyBase):
    owner: OwnerInfo


class PropertyCreate(BaseModel):
    title: str = Field(min_length=5, max_length=255)
    description: str = Field(default="", max_length=5000)
    listing_type: ListingType
    property_type: PropertyType
    price: float = Field(ge=0)

    address: Optional[str] = Field(default=None, max_length=255)
    locality: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    pincode: Optional[str] = Field(default=None, pattern=r"^[0-9]{6}$")

    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    carpet_area: Optional[float] = Field(default=None, ge=0)
    furnishing: Optional[Furnishing] = None

    amenities: List[str] = []
    highlights: List[str] = []
    images: List[PropertyImage] = []


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    listing_type: Optional[ListingType] = None
    property_type: Optional[PropertyType] = None
    price: Optional[float] = Field(default=None, ge=0)

    address: Optional[str] = None
    locality: Optional[str] = None
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    state: Optional[str] = None
    pincode: Optional[str] = Field(default=None, pattern=r"^[0-9]{6}$")

    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    carpet_area: Optional[float] = Field(default=None, ge=0)
    furnishing: Optional[Furnishing] = None

    amenities: Optional[List[str]] = None
    highlights: Optional[List[str]] = None
    images: Optional[List[PropertyImage]] = None

    status: Optional[PropertyStatus] = None


class FeatureRequest(BaseModel):
    days: int = Field(default=30, ge=1, le=365)

