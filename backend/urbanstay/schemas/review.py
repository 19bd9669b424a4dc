# backend/urbanstay/schemas/review.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from urbanstay.db.enums import ReviewStatus


class ReviewCreate(BaseModel):
    property_id: int
    rating: int = Field(ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: str = Field(min_length=10, max_length=2000)
    ratings: Dict[str, int] = {}
    pros: List[str] = []
    cons: List[str] = []


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    title: Optional[str] = Field(default=None, max_length=100)
    comment: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    ratings: Optional[Dict[str, int]] = None
    pros: Optional[List[str]] = None
    cons: Optional[List[str]] = None


class ReviewVoteIn(BaseModel):
    is_helpful: bool


class OwnerReply(BaseModel):
    message: str = Field(min_length=1, max_length=1000)


class ReviewModeration(BaseModel):
    status: Literal["approved", "rejected"]
    rejection_reason: Optional[str] = Field(default=None, max_length=500)


class ReviewAuthor(BaseModel):
    id: int
    name: str
    avatar: str = ""

    model_config = {"from_attributes": True}


class ReviewProperty(BaseModel):
    id: int
    title: str
    city: str

    model_config = {"from_attributes": True}


class ReviewOut(BaseModel):
    id: int
    property_id: int
    user_id: int
    rating: int
    title: Optional[str] = None
    comment: str
    ratings: Dict[str, int] = {}
    pros: List[str] = []
    cons: List[str] = []
    status: ReviewStatus
    rejection_reason: Optional[str] = None
    helpful_votes: int
    owner_response: Optional[str] = None
    owner_responded_at: Optional[datetime] = None
    created_at: datetime

    user: Optional[ReviewAuthor] = None
    property: Optional[ReviewProperty] = None

    model_config = {"from_attributes": True}
