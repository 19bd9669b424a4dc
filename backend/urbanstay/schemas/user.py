# backend/urbanstay/schemas/user.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field

from urbanstay.db.enums import UserRole

PHONE_PATTERN = r"^[0-9]{10}$"


class UserSummary(BaseModel):
    """Contact card embedded in bookings, inquiries and listings."""

    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    avatar: str = ""

    model_config = {"from_attributes": True}


class UserBase(BaseModel):
    id: int
    name: str
    email: EmailStr
    phone: Optional[str] = None
    avatar: str = ""
    role: UserRole
    is_verified: bool = False

    model_config = {"from_attributes": True}


class UserOut(UserBase):
    bio: Optional[str] = None
    company_name: Optional[str] = None
    rera_number: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    # admins are never self-registered
    role: Literal["user", "seller"] = "user"


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    avatar: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=500)
    company_name: Optional[str] = Field(default=None, max_length=255)
    rera_number: Optional[str] = Field(default=None, max_length=100)


class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str


class ForgotPassword(BaseModel):
    email: EmailStr


class ResetPassword(BaseModel):
    email: EmailStr
    otp: str
    new_password: str


class UserRoleUpdate(BaseModel):
    """
    Admin role change:
      body: { "role": "user" | "seller" | "admin" }
    """
    role: UserRole
